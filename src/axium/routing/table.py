"""Ordered route table with prefix/middleware grouping.

Routes are registered during startup and scanned linearly, in
registration order, for every request. The first route whose method and
pattern both match wins, so registration order is part of the contract.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from axium.errors import ConfigurationError
from axium.middleware.spec import MiddlewareSpec, parse_specs
from axium.routing.matcher import match_path, normalize_path
from axium.routing.route import HTTP_METHODS, HandlerRef, Route, RouteMatch

logger = logging.getLogger("axium.routing")

type MiddlewareList = Sequence[MiddlewareSpec | str]


class RouteTable:
    """Ordered collection of routes.

    Usage::

        table = RouteTable()
        table.get("/users/{id}", (UserController, "show"))
        with table.grouped("/admin", ["Auth::check"]):
            table.delete("/users/{id}", (UserController, "destroy"))
        table.freeze()
        match = table.match("GET", "/users/42")

    The group context is a stack: entering a group appends its prefix and
    middlewares to the active ones, leaving restores the previous values
    exactly, even when the body raised.
    """

    __slots__ = ("_frozen", "_group_middlewares", "_group_prefix", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._group_prefix: str = ""
        self._group_middlewares: tuple[MiddlewareSpec, ...] = ()
        self._frozen = False

    # -- Registration --

    def add_route(
        self,
        method: str,
        uri: str,
        handler: Any,
        middlewares: MiddlewareList = (),
    ) -> Route:
        """Register a route under the active group prefix and middlewares."""
        if self._frozen:
            msg = "Cannot add routes after the route table is frozen."
            raise RuntimeError(msg)

        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r} for {uri!r}"
            raise ConfigurationError(msg)

        route = Route(
            method=method,
            path=normalize_path(self._group_prefix, uri),
            handler=HandlerRef.coerce(handler),
            middlewares=(*self._group_middlewares, *parse_specs(middlewares)),
        )
        self._routes.append(route)
        logger.debug("Registered %s %s -> %s", route.method, route.path, route.handler.name)
        return route

    def get(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        """Register a GET route."""
        return self.add_route("GET", uri, handler, middlewares)

    def post(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        """Register a POST route."""
        return self.add_route("POST", uri, handler, middlewares)

    def put(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        """Register a PUT route."""
        return self.add_route("PUT", uri, handler, middlewares)

    def delete(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        """Register a DELETE route."""
        return self.add_route("DELETE", uri, handler, middlewares)

    # -- Grouping --

    @contextmanager
    def grouped(self, prefix: str, middlewares: MiddlewareList = ()) -> Iterator[None]:
        """Scope a prefix and middlewares over the routes registered in the block."""
        previous_prefix = self._group_prefix
        previous_middlewares = self._group_middlewares
        added = parse_specs(middlewares)
        self._group_prefix = normalize_path(previous_prefix, prefix)
        self._group_middlewares = (*previous_middlewares, *added)
        try:
            yield
        finally:
            self._group_prefix = previous_prefix
            self._group_middlewares = previous_middlewares

    def group(
        self,
        prefix: str,
        body: Callable[[], object],
        middlewares: MiddlewareList = (),
    ) -> None:
        """Run *body* with *prefix* and *middlewares* applied to its registrations."""
        with self.grouped(prefix, middlewares):
            body()

    @property
    def current_prefix(self) -> str:
        """The prefix applied to routes registered right now (``""`` outside groups)."""
        return self._group_prefix

    @property
    def current_middlewares(self) -> tuple[MiddlewareSpec, ...]:
        """The group middlewares applied to routes registered right now."""
        return self._group_middlewares

    def truncate(self, count: int) -> None:
        """Drop every route registered after the first *count*."""
        if self._frozen:
            msg = "Cannot remove routes after the route table is frozen."
            raise RuntimeError(msg)
        del self._routes[count:]

    # -- Lookup --

    def freeze(self) -> None:
        """Make the table read-only. No more routes can be added."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or None."""
        for route in self._routes:
            if route.method != method:
                continue
            matched, params = match_path(route.path, path)
            if matched:
                return RouteMatch(route=route, params=tuple(params))
        return None

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration order."""
        return tuple(self._routes)

    def middleware_specs(self) -> Iterable[MiddlewareSpec]:
        """Every middleware spec referenced by any route (for startup validation)."""
        for route in self._routes:
            yield from route.middlewares
