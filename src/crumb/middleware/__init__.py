"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    SessionMiddleware -- Stateless cookie sessions (signed, optionally encrypted)
"""

from crumb.middleware.protocol import Middleware, Next
from crumb.middleware.sessions import (
    CookieOptions,
    SessionConfig,
    SessionMiddleware,
    destroy_session,
    get_session,
    get_session_options,
    set_session,
)

__all__ = [
    "CookieOptions",
    "Middleware",
    "Next",
    "SessionConfig",
    "SessionMiddleware",
    "destroy_session",
    "get_session",
    "get_session_options",
    "set_session",
]
