"""Exact-path routing.

Routes are registered during setup and looked up by ``(path, method)``.
No path parameters: the router only needs to host session-aware handlers.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from crumb.errors import MethodNotAllowed, NotFound


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition."""

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]


def _normalize(path: str) -> str:
    return "/" + path.strip("/")


class Router:
    """Maps a path to its routes, keyed by HTTP method."""

    __slots__ = ("_routes",)

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, Route]] = {}

    def add(self, route: Route) -> None:
        by_method = self._routes.setdefault(_normalize(route.path), {})
        for method in route.methods:
            if method in by_method:
                msg = f"Duplicate route: {method} {route.path!r}"
                raise RuntimeError(msg)
            by_method[method] = route

    def match(self, method: str, path: str) -> Route:
        """Return the route for *method* and *path*.

        Raises ``NotFound`` or ``MethodNotAllowed``. ``HEAD`` falls back
        to the ``GET`` route.
        """
        by_method = self._routes.get(_normalize(path))
        if not by_method:
            raise NotFound(f"No route matches {method} {path!r}")
        route = by_method.get(method)
        if route is None and method == "HEAD":
            route = by_method.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(by_method))
        return route
