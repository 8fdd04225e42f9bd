"""Route, handler variants and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.pattern import CompiledPattern, compile_pattern


class Method(StrEnum):
    """HTTP methods a route can be registered for. ``ANY`` accepts all."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    ANY = "ANY"

    def accepts(self, method: str) -> bool:
        """True if a request with *method* is a candidate for this route."""
        return self is Method.ANY or self.value == method.upper()


@dataclass(frozen=True, slots=True)
class ControllerAction:
    """A symbolic handler: ``"ArticleController@show"``.

    Resolved to a controller class at dispatch time, through the
    controller registry built when modules are loaded.
    """

    controller: str
    action: str

    @classmethod
    def parse(cls, ref: str) -> ControllerAction:
        """Split ``"Name@action"``. Raises ``ConfigurationError`` if malformed."""
        controller, sep, action = ref.partition("@")
        if not sep or not controller.isidentifier() or not action.isidentifier():
            msg = (
                f"Invalid handler reference {ref!r}. "
                "Expected 'ControllerName@action', e.g. 'ArticleController@show'."
            )
            raise ConfigurationError(msg)
        return cls(controller=controller, action=action)

    def __str__(self) -> str:
        return f"{self.controller}@{self.action}"


@dataclass(frozen=True, slots=True)
class InlineHandler:
    """A callable captured at registration time."""

    func: Callable[..., Any]

    def __str__(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


type Handler = ControllerAction | InlineHandler

# Middleware reference on a route: a registered name or an instance.
type MiddlewareRef = str | Any


def parse_handler(handler: Any) -> Handler:
    """Normalise a registration-time handler into a ``Handler`` variant."""
    if isinstance(handler, (ControllerAction, InlineHandler)):
        return handler
    if isinstance(handler, str):
        return ControllerAction.parse(handler)
    if callable(handler):
        return InlineHandler(handler)
    msg = f"Route handler must be a 'Controller@action' string or a callable, got {handler!r}"
    raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class Route:
    """A registered binding from (method, pattern) to a handler.

    Immutable. Group rewriting produces a new Route via ``with_group``.
    """

    method: Method
    pattern: str
    matcher: CompiledPattern
    handler: Handler
    module: str | None = None
    middlewares: tuple[MiddlewareRef, ...] = ()

    @classmethod
    def create(
        cls,
        method: str,
        pattern: str,
        handler: Any,
        module: str | None = None,
        middlewares: tuple[MiddlewareRef, ...] | list[MiddlewareRef] = (),
    ) -> Route:
        """Build a route, compiling the pattern and parsing the handler."""
        try:
            method_enum = Method(method.upper())
        except ValueError:
            allowed = ", ".join(m.value for m in Method)
            msg = f"Unsupported route method {method!r}. Allowed: {allowed}"
            raise ConfigurationError(msg) from None
        return cls(
            method=method_enum,
            pattern=pattern,
            matcher=compile_pattern(pattern),
            handler=parse_handler(handler),
            module=module,
            middlewares=tuple(middlewares),
        )

    def with_group(
        self,
        prefix: str,
        middlewares: tuple[MiddlewareRef, ...],
        module: str | None,
    ) -> Route:
        """Return this route rewritten for an enclosing group.

        The prefix is prepended (a bare ``/`` maps to the prefix itself),
        group middleware runs before the route's own, and the module is
        forced to the group's.
        """
        pattern = prefix + (self.pattern if self.pattern != "/" else "")
        return Route.create(
            self.method,
            pattern or "/",
            self.handler,
            module,
            (*middlewares, *self.middlewares),
        )


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    params: dict[str, str]

    @property
    def module(self) -> str | None:
        return self.route.module

    @property
    def handler(self) -> Handler:
        return self.route.handler

    @property
    def middlewares(self) -> tuple[MiddlewareRef, ...]:
        return self.route.middlewares

    @property
    def positional_args(self) -> tuple[str, ...]:
        """Param values in placeholder declaration order."""
        return tuple(self._ordered())

    def _ordered(self) -> Iterator[str]:
        for name in self.route.matcher.param_names:
            yield self.params[name]
