"""Middleware protocol and the ``Outcome`` of a middleware call.

A middleware runs before the handler and either lets the request through
or stops it. It receives the request and the shared working response;
to stop a request it shapes the response (a redirect, a 403 page) and
returns ``Outcome.HALT``. The pipeline sends that response as-is.

Objects with a ``process`` method and plain callables are both accepted::

    class RequireJson:
        def process(self, request: Request, response: Response) -> Outcome:
            if request.is_json:
                return Outcome.CONTINUE
            response.set_status(415).set_body("JSON only")
            return Outcome.HALT

    def no_bots(request: Request, response: Response) -> bool:
        return "bot" not in (request.header("user-agent") or "")

Returning a bool is allowed; ``False`` means halt.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from perch.errors import HandlerExecutionError
from perch.http.request import Request
from perch.http.response import Response


class Outcome(Enum):
    """What the pipeline does after a middleware returns."""

    CONTINUE = "continue"
    HALT = "halt"

    @classmethod
    def of(cls, value: Any) -> Outcome:
        """Normalise a middleware return value.

        ``None`` continues, so a middleware that only decorates the
        response needs no explicit return.
        """
        if isinstance(value, Outcome):
            return value
        if value is None or value is True:
            return cls.CONTINUE
        if value is False:
            return cls.HALT
        msg = f"Middleware must return an Outcome or a bool, got {value!r}"
        raise HandlerExecutionError(msg)


class Middleware(Protocol):
    """Protocol for perch middleware."""

    def process(self, request: Request, response: Response) -> Outcome | bool: ...


def invoke(middleware: Any, request: Request, response: Response) -> Outcome:
    """Call *middleware* whichever shape it has and normalise the result."""
    process = getattr(middleware, "process", None)
    if process is not None:
        return Outcome.of(process(request, response))
    if callable(middleware):
        return Outcome.of(middleware(request, response))
    msg = f"{middleware!r} is not a middleware: expected a process() method or a callable"
    raise HandlerExecutionError(msg)
