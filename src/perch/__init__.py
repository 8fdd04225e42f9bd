"""Perch: a small HMVC web framework.

Applications are split into modules, each with its own controllers,
views and routes. Requests flow through one synchronous pipeline::

    match route -> global middleware -> route middleware -> handler -> response

Basic usage::

    from perch import App, AppConfig

    app = App(AppConfig(namespace="blog"))

    @app.route("/")
    def index(ctx):
        return "Hello, World!"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "HandlerExecutionError",
    "HandlerResolutionError",
    "Layout",
    "Outcome",
    "PerchError",
    "Request",
    "RequestContext",
    "Response",
    "Router",
    "ServiceContainer",
    "UnknownServiceError",
    "ViewNotFoundError",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "Router":
        from perch.routing.router import Router

        return Router

    if name == "Controller":
        from perch.controller import Controller

        return Controller

    if name == "Layout":
        from perch.views import Layout

        return Layout

    if name == "Outcome":
        from perch.middleware.protocol import Outcome

        return Outcome

    if name == "ServiceContainer":
        from perch.container import ServiceContainer

        return ServiceContainer

    if name in ("RequestContext", "get_request"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "HandlerExecutionError",
        "HandlerResolutionError",
        "PerchError",
        "UnknownServiceError",
        "ViewNotFoundError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
