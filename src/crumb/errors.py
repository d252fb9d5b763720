"""Crumb exception hierarchy.

Shared across the session codec, the middleware, and the ASGI handler
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class CrumbError(Exception):
    """Base for all crumb-specific errors."""


class ConfigurationError(CrumbError):
    """Raised when configuration is invalid.

    Always raised at construction time (``SessionMiddleware``, ``KeyRing``,
    ``CryptoOptions``), never deferred to the first request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(CrumbError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


# -- Session errors --


class SessionError(CrumbError):
    """Base for session failures raised while finalizing a response.

    Untrusted cookie input never raises; these are capacity and
    programmer errors only.
    """


class CookieOverflowError(SessionError):
    """The encoded session does not fit in a single cookie."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Encoded session cookie is {size} bytes, larger than the {limit} byte limit."
        )


class SessionUsageError(SessionError, TypeError):
    """The session was replaced with something that is not a mapping.

    Only ``None``, a falsy value, or a mapping may be assigned.
    """


class SessionSerializationError(SessionError, TypeError):
    """The session value cannot be serialized to JSON."""
