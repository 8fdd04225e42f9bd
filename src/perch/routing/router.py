"""Ordered route table with first-match-wins lookup.

Routes are registered during setup (module loading and explicit calls)
and frozen into an immutable tuple before the first request is served.
Registration order is part of the contract: the first matching route
wins, so specific routes must be registered before overlapping general
ones.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.route import ControllerAction, MiddlewareRef, Route, RouteMatch

# (method, path suffix, action): the canonical resource routes, in
# registration order. "/create" precedes "/{id}" so it is not captured
# as an id.
RESOURCE_ACTIONS: tuple[tuple[str, str, str], ...] = (
    ("GET", "", "index"),
    ("GET", "/create", "create"),
    ("POST", "", "store"),
    ("GET", "/{id}", "show"),
    ("GET", "/{id}/edit", "edit"),
    ("PUT", "/{id}", "update"),
    ("DELETE", "/{id}", "destroy"),
)


class Router:
    """Linear route table.

    Usage::

        router = Router()
        router.get("/articles/{id}", "ArticleController@show", "Blog")
        router.freeze()
        match = router.match("GET", "/articles/42")
        # match.params == {"id": "42"}
    """

    __slots__ = ("_frozen", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] | tuple[Route, ...] = []
        self._frozen = False

    # -- Registration --

    def add(
        self,
        method: str,
        pattern: str,
        handler: Any,
        module: str | None = None,
        middlewares: Iterable[MiddlewareRef] = (),
    ) -> Router:
        """Register a route. Must be called before ``freeze()``."""
        self.add_route(Route.create(method, pattern, handler, module, tuple(middlewares)))
        return self

    def add_route(self, route: Route) -> None:
        """Append an already-built route."""
        if self._frozen:
            msg = "Cannot add routes after the router has been frozen."
            raise RuntimeError(msg)
        self._routes.append(route)  # type: ignore[union-attr]

    def get(self, pattern: str, handler: Any, module: str | None = None,
            middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("GET", pattern, handler, module, middlewares)

    def post(self, pattern: str, handler: Any, module: str | None = None,
             middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("POST", pattern, handler, module, middlewares)

    def put(self, pattern: str, handler: Any, module: str | None = None,
            middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("PUT", pattern, handler, module, middlewares)

    def delete(self, pattern: str, handler: Any, module: str | None = None,
               middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("DELETE", pattern, handler, module, middlewares)

    def patch(self, pattern: str, handler: Any, module: str | None = None,
              middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("PATCH", pattern, handler, module, middlewares)

    def any(self, pattern: str, handler: Any, module: str | None = None,
            middlewares: Iterable[MiddlewareRef] = ()) -> Router:
        return self.add("ANY", pattern, handler, module, middlewares)

    def group(
        self,
        prefix: str,
        middlewares: Iterable[MiddlewareRef],
        module: str | None,
        register: Callable[[Router], Any],
    ) -> Router:
        """Register a block of routes sharing a prefix, middleware and module.

        *register* runs against a fresh scratch router, so nested groups
        compose: an inner group appends its rewritten routes to the outer
        scratch router, which the outer group then rewrites again.

        Group middleware is placed before each route's own middleware.
        """
        if self._frozen:
            msg = "Cannot add routes after the router has been frozen."
            raise RuntimeError(msg)

        scratch = Router()
        register(scratch)

        group_mw = tuple(middlewares)
        for route in scratch.routes:
            self.add_route(route.with_group(prefix, group_mw, module))
        return self

    def resource(
        self,
        name: str,
        controller: str,
        module: str | None = None,
        middlewares: Iterable[MiddlewareRef] = (),
        *,
        only: Iterable[str] | None = None,
    ) -> Router:
        """Register the seven CRUD routes for *name* on *controller*.

        ======  ====================  =======
        GET     /{name}               index
        GET     /{name}/create        create
        POST    /{name}               store
        GET     /{name}/{id}          show
        GET     /{name}/{id}/edit     edit
        PUT     /{name}/{id}          update
        DELETE  /{name}/{id}          destroy
        ======  ====================  =======

        Pass *only* to register a subset of actions (order is preserved).
        """
        if not name.strip("/"):
            msg = f"Resource name must not be empty (controller {controller!r})"
            raise ConfigurationError(msg)

        actions = {action for _, _, action in RESOURCE_ACTIONS}
        wanted = actions if only is None else set(only)
        unknown = wanted - actions
        if unknown:
            msg = (
                f"Unknown resource action(s) {sorted(unknown)} for {name!r}. "
                f"Valid actions: {', '.join(a for _, _, a in RESOURCE_ACTIONS)}"
            )
            raise ConfigurationError(msg)

        base = "/" + name.strip("/")
        mw = tuple(middlewares)
        for method, suffix, action in RESOURCE_ACTIONS:
            if action in wanted:
                handler = ControllerAction.parse(f"{controller}@{action}")
                self.add(method, base + suffix, handler, module, mw)
        return self

    # -- Lookup --

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route accepting *method* whose pattern matches *path*.

        Absence of a match is a normal return value, not an exception.
        """
        for route in self._routes:
            if not route.method.accepts(method):
                continue
            params = route.matcher.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    # -- Lifecycle --

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in registration order."""
        return tuple(self._routes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the route table read-only. Safe to call more than once."""
        self._routes = tuple(self._routes)
        self._frozen = True

    def __len__(self) -> int:
        return len(self._routes)
