"""Tests for crumb.routing: exact-path route lookup."""

import pytest

from crumb.errors import MethodNotAllowed, NotFound
from crumb.routing import Route, Router


def _route(path: str, *methods: str) -> Route:
    return Route(path=path, handler=lambda: None, methods=frozenset(methods or ("GET",)))


class TestRouter:
    def test_match(self) -> None:
        router = Router()
        route = _route("/users")
        router.add(route)
        assert router.match("GET", "/users") is route

    def test_paths_are_normalized(self) -> None:
        router = Router()
        route = _route("users/")
        router.add(route)
        assert router.match("GET", "/users/") is route
        assert router.match("GET", "/users") is route

    def test_methods_share_a_path(self) -> None:
        router = Router()
        get_route = _route("/item", "GET")
        post_route = _route("/item", "POST")
        router.add(get_route)
        router.add(post_route)
        assert router.match("POST", "/item") is post_route
        assert router.match("GET", "/item") is get_route

    def test_not_found(self) -> None:
        with pytest.raises(NotFound):
            Router().match("GET", "/missing")

    def test_method_not_allowed_lists_methods(self) -> None:
        router = Router()
        router.add(_route("/item", "POST", "PUT"))
        with pytest.raises(MethodNotAllowed) as info:
            router.match("GET", "/item")
        assert info.value.headers == (("Allow", "POST, PUT"),)

    def test_head_uses_get(self) -> None:
        router = Router()
        route = _route("/")
        router.add(route)
        assert router.match("HEAD", "/") is route

    def test_duplicate_raises(self) -> None:
        router = Router()
        router.add(_route("/", "GET"))
        with pytest.raises(RuntimeError, match="Duplicate route"):
            router.add(_route("/", "GET", "POST"))
