"""Per-request context handed to handlers.

Inline handlers receive a ``RequestContext`` as their first argument;
controllers are constructed with one. ``request_var`` additionally makes
the current request reachable from code that has no context at hand
(template helpers, services).
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from perch.http.request import Request
from perch.http.response import Response

if TYPE_CHECKING:
    from perch.container import ServiceContainer
    from perch.views import ViewRenderer

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The request being dispatched. Set by the pipeline around handling."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request.
    """
    return request_var.get()


@dataclass(slots=True)
class RequestContext:
    """Everything a handler needs for one request.

    ``response`` is the working response shared with middleware;
    handlers may shape it in place or return a new one.
    """

    request: Request
    response: Response
    container: ServiceContainer
    views: ViewRenderer
    app: Any = None
    module: str | None = None
    params: dict[str, str] = field(default_factory=dict)

    def service(self, key: Any) -> Any:
        """Resolve *key* from the app's service container."""
        return self.container.resolve(key)

    def view(self, name: str, **data: Any) -> str:
        """Render a view of the route's module (or ``"Module:view"``, ``"/path"``)."""
        return self.views.render(name, data, module=self.module)
