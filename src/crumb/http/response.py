"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime

from crumb.http.cookies import EPOCH, SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status, headers, and cookies. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def with_set_cookie(self, cookie: SetCookie, *, overwrite: bool = False) -> Response:
        """Return a new Response carrying *cookie*.

        With ``overwrite=True`` any cookie of the same name already on the
        response is dropped first, so only the last one is sent.
        """
        cookies = self.cookies
        if overwrite:
            cookies = tuple(c for c in cookies if c.name != cookie.name)
        return replace(self, cookies=(*cookies, cookie))

    def with_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        expires: datetime | None = None,
        path: str | None = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str | None = "lax",
    ) -> Response:
        """Return a new Response with an additional Set-Cookie."""
        cookie = SetCookie(
            name=name,
            value=value,
            max_age=max_age,
            expires=expires,
            path=path,
            domain=domain,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        return self.with_set_cookie(cookie)

    def without_cookie(self, name: str, path: str | None = "/", domain: str | None = None) -> Response:
        """Return a new Response that deletes a cookie (empty value, expired)."""
        cookie = SetCookie(name=name, value="", max_age=0, expires=EPOCH, path=path, domain=domain)
        return self.with_set_cookie(cookie, overwrite=True)

    # -- Header access --

    def set_cookie_headers(self) -> list[str]:
        """Every ``Set-Cookie`` header value this response carries.

        Includes cookies attached with ``with_cookie()`` and any raw
        ``set-cookie`` headers (as captured by the test client).
        """
        raw = [value for name, value in self.headers if name.lower() == "set-cookie"]
        return raw + [cookie.to_header_value() for cookie in self.cookies]

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
