"""Routing: ordered route table with first-match-wins lookup.

Routes are registered during setup and frozen into an immutable
table before the first request is served.
"""

from perch.routing.pattern import CompiledPattern, compile_pattern
from perch.routing.route import (
    ControllerAction,
    Handler,
    InlineHandler,
    Method,
    Route,
    RouteMatch,
)
from perch.routing.router import RESOURCE_ACTIONS, Router

__all__ = [
    "RESOURCE_ACTIONS",
    "CompiledPattern",
    "ControllerAction",
    "Handler",
    "InlineHandler",
    "Method",
    "Route",
    "RouteMatch",
    "Router",
    "compile_pattern",
]
