"""Error responses for the dispatch pipeline.

404 and 500 responses come from user-registered error handlers when one
matches, else from the defaults here. Every 500 is logged with its
traceback; a 404 is routine and only logged at debug level.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from perch.errors import HandlerResolutionError
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.route import Route

logger = logging.getLogger("perch.server")

type ErrorHandler = Callable[..., Any]
type ErrorHandlers = Mapping[int | type[BaseException], ErrorHandler]

NOT_FOUND_BODY = "Not Found"
INTERNAL_ERROR_PAGE = (
    "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Server Error</title></head>"
    "<body><h1>Something went wrong</h1><p>Please try again later.</p></body></html>"
)


def call_error_handler(
    handler: ErrorHandler,
    request: Request,
    exc: BaseException | None,
    status: int,
) -> Response:
    """Invoke a user error handler and coerce its result into a Response.

    Handlers may accept zero, one (request) or two (request, exc) args.
    A returned ``Response`` that kept the default 200 gets *status*.
    """
    params = list(inspect.signature(handler).parameters.values())
    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if isinstance(result, Response):
        if result.status == 200:
            result.set_status(status)
        return result
    body = result if isinstance(result, (str, bytes)) else ("" if result is None else str(result))
    return Response(body=body, status=status)


def _find_handler(exc: BaseException, error_handlers: ErrorHandlers) -> ErrorHandler | None:
    for cls in type(exc).__mro__:
        if cls in error_handlers:
            return error_handlers[cls]
    return error_handlers.get(500)


def handle_not_found(request: Request, error_handlers: ErrorHandlers) -> Response:
    logger.debug("404 %s %s", request.method, request.path)
    handler = error_handlers.get(404)
    if handler is not None:
        try:
            return call_error_handler(handler, request, None, 404)
        except Exception:
            logger.exception("404 error handler failed for %s %s", request.method, request.path)
    response = Response(body=NOT_FOUND_BODY, status=404)
    return response.set_header("Content-Type", "text/plain; charset=utf-8")


def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
    route: Route | None = None,
) -> Response:
    """Turn an unexpected exception into a 500 response."""
    if isinstance(exc, HandlerResolutionError):
        logger.exception(
            "500 %s %s: cannot resolve %s@%s",
            request.method,
            request.path,
            exc.controller,
            exc.action,
        )
    else:
        logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(exc, error_handlers)
    if handler is not None:
        try:
            return call_error_handler(handler, request, exc, 500)
        except Exception:
            logger.exception("500 error handler failed for %s %s", request.method, request.path)

    if debug:
        from perch.server.debug_page import render_debug_page

        return Response(body=render_debug_page(exc, request, route), status=500)
    return Response(body=INTERNAL_ERROR_PAGE, status=500)
