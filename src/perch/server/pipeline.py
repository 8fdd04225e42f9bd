"""Dispatch pipeline: one request in, one response out.

Stages, in order::

    match route -> global middleware -> route middleware -> handler -> response

No match is a 404 and no middleware runs. A middleware returning
``Outcome.HALT`` ends the request with whatever it put on the working
response. Anything raised from middleware onwards becomes a 500.
Response hooks registered on the request run last, on whichever response
is going out.

The pipeline is synchronous; the ASGI handler runs it in a worker thread.
"""

import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from perch.context import RequestContext, request_var
from perch.controller import Controller
from perch.errors import ConfigurationError, HandlerExecutionError, HandlerResolutionError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Outcome, invoke
from perch.modules import ControllerRegistry
from perch.routing.route import ControllerAction, InlineHandler, MiddlewareRef, RouteMatch
from perch.routing.router import Router
from perch.server.errors import ErrorHandlers, handle_internal_error, handle_not_found

logger = logging.getLogger("perch.server")

type ContextFactory = Callable[[Request, Response, RouteMatch], RequestContext]


def run_pipeline(
    request: Request,
    *,
    router: Router,
    middleware: Iterable[Any],
    named_middleware: Mapping[str, Any],
    controllers: ControllerRegistry,
    context_factory: ContextFactory,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Dispatch *request* and return the response to send."""
    match = router.match(request.method, request.path)
    if match is None:
        return _finish(request, handle_not_found(request, error_handlers), error_handlers, debug)

    response = Response()
    token = request_var.set(request)
    try:
        if _run_middleware(request, response, match, middleware, named_middleware):
            ctx = context_factory(request, response, match)
            result = call_handler(match, ctx, controllers)
            response = normalize_result(result, ctx.response)
        else:
            logger.debug("Halted by middleware: %s %s", request.method, request.path)
    except Exception as exc:
        response = handle_internal_error(exc, request, error_handlers, debug, match.route)
    finally:
        request_var.reset(token)

    return _finish(request, response, error_handlers, debug)


def _run_middleware(
    request: Request,
    response: Response,
    match: RouteMatch,
    middleware: Iterable[Any],
    named_middleware: Mapping[str, Any],
) -> bool:
    """Run global then route middleware. False if one of them halted."""
    for mw in middleware:
        if invoke(mw, request, response) is Outcome.HALT:
            return False
    for ref in match.middlewares:
        mw = resolve_middleware(ref, named_middleware)
        if invoke(mw, request, response) is Outcome.HALT:
            return False
    return True


def resolve_middleware(ref: MiddlewareRef, named_middleware: Mapping[str, Any]) -> Any:
    """Turn a route's middleware reference into a middleware object.

    Names resolve through the app's registry. Classes are instantiated
    for each request; instances and callables are used as they are.
    """
    target = ref
    if isinstance(ref, str):
        try:
            target = named_middleware[ref]
        except KeyError:
            msg = f"Unknown middleware {ref!r}. Register it with app.register_middleware()."
            raise ConfigurationError(msg) from None
    if isinstance(target, type):
        return target()
    return target


def call_handler(match: RouteMatch, ctx: RequestContext, controllers: ControllerRegistry) -> Any:
    """Invoke the matched handler with the route params, positionally."""
    handler = match.handler
    args = match.positional_args

    if isinstance(handler, InlineHandler):
        return handler.func(ctx, *args)

    if isinstance(handler, ControllerAction):
        action = resolve_action(handler, match.module, ctx, controllers)
        return action(*args)

    msg = f"Unsupported handler {handler!r}"
    raise HandlerExecutionError(msg)


def resolve_action(
    handler: ControllerAction,
    module: str | None,
    ctx: RequestContext,
    controllers: ControllerRegistry,
) -> Callable[..., Any]:
    """Instantiate the controller for *handler* and return its bound action.

    Raises:
        HandlerResolutionError: If the route has no module, the controller
            class is not registered, or the action does not exist.
    """
    name, action = handler.controller, handler.action
    if module is None:
        raise HandlerResolutionError(name, action, f"Route handler {handler} has no module")

    cls = controllers.lookup(module, name)
    if cls is None:
        path = controllers.path_for(module, name)
        raise HandlerResolutionError(name, action, f"Controller {path!r} not found")

    instance: Controller = cls(ctx)
    method = getattr(instance, action, None) if not action.startswith("_") else None
    if not callable(method):
        msg = f"Action {action!r} not found in controller {cls.__qualname__}"
        raise HandlerResolutionError(name, action, msg)
    return method


def normalize_result(result: Any, working: Response) -> Response:
    """Turn a handler's return value into the response to send.

    ======================  ======================================
    ``None``                the working response, as shaped in place
    ``Response``            replaces the working response
    ``str`` / ``bytes``     body of the working response
    ``dict`` / ``list``     JSON body of the working response
    ======================  ======================================
    """
    if result is None:
        return working
    if isinstance(result, Response):
        return result
    if isinstance(result, (str, bytes)):
        return working.set_body(result)
    if isinstance(result, (dict, list)):
        return working.json(result, working.status)
    if inspect.isawaitable(result):
        close = getattr(result, "close", None)
        if close is not None:
            close()
        msg = "Handlers must be synchronous; got an awaitable. Remove 'async' from the handler."
        raise HandlerExecutionError(msg)
    msg = (
        f"Handler returned {type(result).__name__}. "
        "Return a str, bytes, dict, list, Response, or None."
    )
    raise HandlerExecutionError(msg)


def _finish(
    request: Request,
    response: Response,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Run the request's response hooks on the outgoing response."""
    try:
        for hook in request.response_hooks:
            hook(response)
    except Exception as exc:
        return handle_internal_error(exc, request, error_handlers, debug)
    return response
