"""App import resolution: ``"module:attribute"`` strings to App instances.

Shared by ``perch run`` and ``perch routes``.
"""

import importlib

from perch.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a perch App instance.

    Accepts ``"module:attribute"``. When the attribute is omitted it
    defaults to ``"app"``. A callable that is not an App is treated as a
    factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a perch ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)

    return obj
