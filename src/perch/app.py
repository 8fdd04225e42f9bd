"""Perch application class.

Mutable during setup (modules, routes, middleware, services).
Frozen when the first request arrives or ``app.run()`` is called.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.container import ServiceContainer
from perch.context import RequestContext
from perch.controller import Controller
from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.modules import ControllerRegistry, ModuleInfo, discover_modules
from perch.routing.route import ControllerAction, MiddlewareRef, RouteMatch
from perch.routing.router import Router
from perch.server.errors import ErrorHandler
from perch.server.handler import handle_request
from perch.server.pipeline import run_pipeline
from perch.views import ViewRenderer

logger = logging.getLogger("perch.app")


class App:
    """The perch application.

    Usage::

        app = App(AppConfig(namespace="blog", debug=True))
        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
        app.register_middleware("auth", AuthMiddleware())

        @app.route("/health")
        def health(ctx):
            return {"ok": True}

    Modules under ``blog.Modules`` are discovered when the app freezes.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread loads modules and freezes the
        route table, even if several requests arrive at once.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_modules",
        "_named_middleware",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "container",
        "controllers",
        "router",
        "views",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router = Router()
        self.container = ServiceContainer()
        self.controllers = ControllerRegistry(self.config.namespace or "app")
        self.views = ViewRenderer(self.config)
        self._middleware_list: list[Any] = []
        self._named_middleware: dict[str, Any] = {}
        self._error_handlers: dict[int | type[BaseException], ErrorHandler] = {}
        self._modules: dict[str, ModuleInfo] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._middleware: tuple[Any, ...] = ()

    # -- Route registration --

    def route(
        self,
        pattern: str,
        *,
        methods: Iterable[str] | None = None,
        module: str | None = None,
        middlewares: Iterable[MiddlewareRef] = (),
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an inline handler via decorator.

        The handler receives the ``RequestContext`` followed by the route
        parameters in pattern order::

            @app.route("/hello/{name}")
            def hello(ctx, name):
                return f"Hello, {name}"
        """
        mw = tuple(middlewares)

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            for method in methods or ("GET",):
                self.router.add(method, pattern, func, module, mw)
            return func

        return decorator

    # -- Modules and controllers --

    def register_module(
        self,
        name: str,
        register: Callable[[Router, str], Any] | None = None,
        path: str | Path | None = None,
    ) -> ModuleInfo:
        """Register a module by hand, optionally with its route hook.

        *path* is the module directory; its ``Views`` folder holds the
        module's templates.
        """
        self._check_not_frozen()
        info = ModuleInfo(name=name, path=Path(path) if path is not None else None)
        self._add_module(info)
        if register is not None:
            register(self.router, name)
        return info

    def register_controller(
        self,
        module: str,
        controller: type[Controller],
        name: str | None = None,
    ) -> str:
        """Make *controller* resolvable as ``<name>@action`` for routes of *module*."""
        self._check_not_frozen()
        return self.controllers.add(module, controller, name)

    @property
    def modules(self) -> dict[str, ModuleInfo]:
        return dict(self._modules)

    # -- Middleware --

    def add_middleware(self, middleware: Any) -> App:
        """Add a global middleware, run for every matched request."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)
        return self

    def register_middleware(self, name: str, middleware: Any) -> App:
        """Make *middleware* (a class or an instance) available to routes by *name*."""
        self._check_not_frozen()
        self._named_middleware[name] = middleware
        return self

    # -- Services --

    def service(self, key: Any) -> Any:
        return self.container.resolve(key)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[BaseException],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for 404, 500 or an exception type."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async startup hook, run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async shutdown hook, run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Dispatch --

    def handle(self, request: Request) -> Response:
        """Dispatch *request* synchronously and return the response."""
        self._ensure_frozen()
        return run_pipeline(
            request,
            router=self.router,
            middleware=self._middleware,
            named_middleware=self._named_middleware,
            controllers=self.controllers,
            context_factory=self._make_context,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    def _make_context(
        self, request: Request, response: Response, match: RouteMatch
    ) -> RequestContext:
        return RequestContext(
            request=request,
            response=response,
            container=self.container,
            views=self.views,
            app=self,
            module=match.module,
            params=dict(match.params),
        )

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the development server."""
        self._ensure_frozen()
        from perch.server.dev import run_dev_server

        run_dev_server(self, host or self.config.host, port or self.config.port)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            dispatch=self.handle,
            base_path=self.config.base_path,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup so configuration errors surface before
        the first request, then runs the startup and shutdown hooks.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started serving requests."
            raise RuntimeError(msg)

    def _add_module(self, info: ModuleInfo) -> None:
        self._modules[info.name] = info
        if info.path is not None:
            self.views.add_module(info.name, info.path)

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Load modules, validate routes and freeze the route table.

        MUST only be called while holding _freeze_lock.
        """
        if self.config.namespace:
            for info in discover_modules(self.config.namespace, self.router, self.controllers):
                self._add_module(info)

        self._validate_routes()
        self._middleware = tuple(self._middleware_list)
        self.router.freeze()
        self._frozen = True
        logger.info(
            "%s ready: %d route(s), %d module(s), %d controller(s)",
            self.config.app_name,
            len(self.router),
            len(self._modules),
            len(self.controllers),
        )

    def _validate_routes(self) -> None:
        for route in self.router.routes:
            handler = route.handler
            if isinstance(handler, ControllerAction):
                if route.module is None:
                    msg = (
                        f"Route {route.method} {route.pattern} uses {handler} but has no module. "
                        "Pass module= or register it inside a module's router."
                    )
                    raise ConfigurationError(msg)
                if self.controllers.lookup(route.module, handler.controller) is None:
                    logger.warning(
                        "Route %s %s: controller %s is not registered",
                        route.method,
                        route.pattern,
                        self.controllers.path_for(route.module, handler.controller),
                    )
            for ref in route.middlewares:
                if isinstance(ref, str) and ref not in self._named_middleware:
                    msg = (
                        f"Route {route.method} {route.pattern} uses unknown middleware {ref!r}. "
                        "Register it with app.register_middleware()."
                    )
                    raise ConfigurationError(msg)
