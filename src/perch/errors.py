"""Perch exception hierarchy.

Shared across Router, App, the dispatch pipeline and middleware so every
module raises and catches the same types.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when routes, modules or middleware are registered incorrectly.

    Raised eagerly: at registration time for malformed patterns and
    handlers, and during ``App._ensure_frozen()`` for anything that can only be
    checked once every module is loaded.
    """


class HandlerResolutionError(PerchError):
    """A symbolic ``Controller@action`` handler could not be resolved.

    Indicates a programming defect (missing controller class or missing
    action method), never bad user input. Always logged with the class
    and action names.
    """

    def __init__(self, controller: str, action: str, detail: str) -> None:
        self.controller = controller
        self.action = action
        super().__init__(detail)


class HandlerExecutionError(PerchError):
    """A handler returned something the pipeline cannot turn into a response."""


class UnknownServiceError(PerchError, LookupError):
    """Raised when resolving a key the ServiceContainer does not know."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Service not registered: {key!r}")


class ViewNotFoundError(PerchError):
    """A view or layout template does not exist on disk."""


class ResponseAlreadySent(PerchError):  # noqa: N818
    """A Response was handed to the transport a second time."""
