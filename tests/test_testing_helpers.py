"""Tests for crumb.testing: TestClient and cookie_header."""

from crumb.app import App
from crumb.http.request import Request
from crumb.http.response import Response
from crumb.testing import TestClient, cookie_header


class TestCookieHeader:
    def test_drops_attributes(self) -> None:
        response = Response(
            headers=(
                ("set-cookie", "a=1; Path=/; HttpOnly"),
                ("set-cookie", "b=x==.sig; Max-Age=60"),
            )
        )
        assert cookie_header(response) == "a=1; b=x==.sig"

    def test_last_cookie_of_a_name_wins(self) -> None:
        response = Response().with_cookie("a", "1").with_cookie("a", "2")
        assert cookie_header(response) == "a=2"

    def test_no_cookies(self) -> None:
        assert cookie_header(Response()) == ""


class TestTestClient:
    async def test_scheme(self) -> None:
        app = App()

        @app.route("/")
        def index(request: Request):
            return f"{request.scheme} {request.is_secure}"

        async with TestClient(app, scheme="https") as client:
            assert (await client.get("/")).text == "https True"
            assert (await client.get("/", scheme="http")).text == "http False"

    async def test_set_cookie_kept_as_raw_headers(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return Response("ok").with_cookie("a", "1")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.cookies == ()
            assert ("set-cookie", "a=1; Path=/; HttpOnly; SameSite=lax") in response.headers
            assert cookie_header(response) == "a=1"

    async def test_query_string(self) -> None:
        app = App()

        @app.route("/search")
        def search(request: Request):
            return request.url

        async with TestClient(app) as client:
            assert (await client.get("/search?q=crumb")).text == "/search?q=crumb"
