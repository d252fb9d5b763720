"""ASGI handler: one HTTP exchange through middleware, routing and errors.

The only place that turns a raw ASGI scope into a ``Request`` and a
``Response`` back into ASGI messages.
"""

import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from crumb._internal.asgi import Receive, Scope, Send
from crumb._internal.invoke import invoke
from crumb.errors import HTTPError
from crumb.http.request import Request
from crumb.http.response import Response
from crumb.middleware.protocol import Middleware, Next
from crumb.routing import Router
from crumb.server.errors import handle_http_error, handle_internal_error
from crumb.server.negotiation import negotiate
from crumb.server.sender import send_response


def build_chain(middleware: Sequence[Middleware], endpoint: Next) -> Next:
    """Wrap *endpoint* so ``middleware[0]`` runs first and sees the final response."""
    chain = endpoint
    for mw in reversed(middleware):

        async def link(request: Request, _mw: Middleware = mw, _next: Next = chain) -> Response:
            return await _mw(request, _next)

        chain = link
    return chain


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: Sequence[Middleware],
    error_handlers: Mapping[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Serve one ``http`` scope.

    Anything raised by middleware or the handler, including session
    errors raised while the session middleware finalizes the response,
    becomes an error response here.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def endpoint(req: Request) -> Response:
        return await call_handler(router.match(req.method, req.path).handler, req)

    try:
        response = await build_chain(middleware, endpoint)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    await send_response(response, send, head=request.method == "HEAD")


async def call_handler(handler: Callable[..., Any], request: Request) -> Response:
    """Call a route handler, passing the request to a ``request`` parameter."""
    kwargs = {
        name: request
        for name, param in inspect.signature(handler, eval_str=True).parameters.items()
        if name == "request" or param.annotation is Request
    }
    return negotiate(await invoke(handler, **kwargs))
