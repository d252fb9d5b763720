"""Inbound HTTP request.

A frozen snapshot of the ASGI scope. The session middleware only reads
``cookies``, ``scheme`` and ``headers``; handlers may also read the body.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from crumb._internal.asgi import Receive
from crumb.http.cookies import parse_cookies
from crumb.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """One inbound HTTP request.

    ``cookies`` is parsed once, in ``from_asgi``, from every ``Cookie``
    header line joined together (HTTP/2 clients may split them).
    Constructing a ``Request`` directly is fine for tests: only
    ``method`` and ``path`` are required.
    """

    method: str
    path: str
    scheme: str = "http"
    headers: Headers = field(default_factory=Headers)
    query_string: str = ""
    cookies: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    # Filled with the full body on first read
    _body: list[bytes] = field(default_factory=list, repr=False, compare=False)

    @property
    def is_secure(self) -> bool:
        """True if the request arrived over TLS, as reported by the server."""
        return self.scheme in ("https", "wss")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        return f"{self.path}?{self.query_string}" if self.query_string else self.path

    async def body(self) -> bytes:
        """The full request body, read from the ASGI channel on first use."""
        if not self._body:
            chunks: list[bytes] = []
            more = self._receive is not None
            while more:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                more = message.get("more_body", False)
            self._body.append(b"".join(chunks))
        return self._body[0]

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Build a Request from an ASGI ``http`` scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            scheme=scope.get("scheme", "http"),
            headers=headers,
            query_string=scope.get("query_string", b"").decode("latin-1"),
            cookies=parse_cookies("; ".join(headers.get_list("cookie"))),
            client=(client[0], client[1]) if client else None,
            _receive=receive,
        )
