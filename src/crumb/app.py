"""Crumb application: the ASGI callable that hosts the middleware pipeline.

Routes, middleware and error handlers are registered during setup. The
first request (or lifespan startup, or ``TestClient``) compiles them into
an immutable ``Pipeline``; after that the app refuses further changes.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

from crumb._internal.asgi import Receive, Scope, Send
from crumb.middleware.protocol import Middleware
from crumb.routing import Route, Router
from crumb.server.handler import handle_request

logger = logging.getLogger("crumb.server")

Handler: TypeAlias = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Compiled, read-only request pipeline shared by every request."""

    router: Router
    middleware: tuple[Middleware, ...]
    error_handlers: MappingProxyType[int | type, Handler]


class App:
    """An ASGI application hosting routes behind a middleware chain.

    Usage::

        from crumb import App
        from crumb.middleware.sessions import SessionConfig, SessionMiddleware, get_session

        app = App()
        app.add_middleware(SessionMiddleware(SessionConfig(keys=["secret"])))

        @app.route("/")
        def index():
            get_session()["seen"] = True
            return "hello"

    Compilation happens once, under a lock, so concurrent first requests
    all see the same ``Pipeline``.
    """

    __slots__ = (
        "_compile_lock",
        "_error_handlers",
        "_middleware",
        "_pipeline",
        "_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        "debug",
    )

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug
        self._routes: list[Route] = []
        self._middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, Handler] = {}
        self._startup_hooks: list[Handler] = []
        self._shutdown_hooks: list[Handler] = []
        self._pipeline: Pipeline | None = None
        self._compile_lock = threading.Lock()

    # -- Setup --

    def route(self, path: str, *, methods: list[str] | None = None) -> Callable[[Handler], Handler]:
        """Register a handler for *path* (``GET`` unless *methods* says otherwise)."""
        self._ensure_mutable()
        allowed = frozenset(method.upper() for method in methods or ("GET",))

        def register(func: Handler) -> Handler:
            self._routes.append(Route(path=path, handler=func, methods=allowed))
            return func

        return register

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a middleware. The first one added is the outermost."""
        self._ensure_mutable()
        self._middleware.append(middleware)

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[Handler], Handler]:
        """Register an error handler for a status code or an exception type.

        Handlers take zero, one (request) or two (request, exc) arguments
        and may be sync or async::

            @app.error(CookieOverflowError)
            def too_big(request, exc):
                return ("Session too large", 500)
        """
        self._ensure_mutable()

        def register(func: Handler) -> Handler:
            self._error_handlers[code_or_exception] = func
            return func

        return register

    def on_startup(self, func: Handler) -> Handler:
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Handler) -> Handler:
        self._shutdown_hooks.append(func)
        return func

    def _ensure_mutable(self) -> None:
        if self._pipeline is not None:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware and error handlers during setup."
            )
            raise RuntimeError(msg)

    # -- Compile --

    def compile(self) -> Pipeline:
        """Build the pipeline on first use; later calls return the same one.

        Raises ``RuntimeError`` for duplicate routes.
        """
        if self._pipeline is None:
            with self._compile_lock:
                if self._pipeline is None:
                    router = Router()
                    for route in self._routes:
                        router.add(route)
                    self._pipeline = Pipeline(
                        router=router,
                        middleware=tuple(self._middleware),
                        error_handlers=MappingProxyType(dict(self._error_handlers)),
                    )
        return self._pipeline

    # -- Lifecycle --

    async def startup(self) -> None:
        self.compile()
        await _run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        await _run_hooks(self._shutdown_hooks)

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        pipeline = self.compile()
        await handle_request(
            scope,
            receive,
            send,
            router=pipeline.router,
            middleware=pipeline.middleware,
            error_handlers=pipeline.error_handlers,
            debug=self.debug,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            match message["type"]:
                case "lifespan.startup":
                    try:
                        await self.startup()
                    except Exception as exc:
                        logger.exception("Startup failed")
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        return
                    await send({"type": "lifespan.startup.complete"})
                case "lifespan.shutdown":
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                    return


async def _run_hooks(hooks: list[Handler]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result
