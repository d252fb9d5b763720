"""Error responses for failed requests.

``HTTPError`` keeps its own status. Anything else (including a session
that could not be written back) is a 500. Either way a handler
registered with ``@app.error(...)`` gets the first chance to respond:
the most specific exception type wins, then the status code.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from crumb._internal.invoke import invoke
from crumb.errors import HTTPError
from crumb.http.request import Request
from crumb.http.response import Response
from crumb.server.negotiation import negotiate

logger = logging.getLogger("crumb.server")

ErrorHandlers: TypeAlias = Mapping[int | type, Callable[..., Any]]


def find_error_handler(
    error_handlers: ErrorHandlers, exc: Exception, status: int
) -> Callable[..., Any] | None:
    """Handler for the closest class in ``type(exc).__mro__``, else for *status*."""
    for cls in type(exc).__mro__:
        if cls in error_handlers:
            return error_handlers[cls]
    return error_handlers.get(status)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
) -> Response:
    """Run a user error handler with as many of (request, exc) as it accepts.

    A handler that returns a plain 200 response inherits *status*.
    """
    arity = len(inspect.signature(handler).parameters)
    response = negotiate(await invoke(handler, *(request, exc)[: min(arity, 2)]))
    return response.with_status(status) if response.status == 200 else response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = find_error_handler(error_handlers, exc, exc.status)
    if handler is not None:
        return await call_error_handler(handler, request, exc, exc.status)

    body = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        body = f"{exc.status}: {exc.detail}"
    return Response(body=body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Log *exc* with its traceback and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = find_error_handler(error_handlers, exc, 500)
    if handler is not None:
        return await call_error_handler(handler, request, exc, 500)

    body = f"Internal Server Error: {type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body, status=500)
