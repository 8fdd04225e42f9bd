"""Module discovery and the controller registry.

An application is split into modules, each a sub-package of
``<namespace>.Modules``::

    blog/
        Modules/
            News/
                Controllers/
                    news.py        # class NewsController(Controller)
                Views/
                    index.html
                router.py          # def register(router, module): ...

Discovery imports every module's controllers, registers the ``Controller``
subclasses under ``<namespace>.Modules.<Module>.Controllers.<ClassName>``,
then calls the module's ``router.register(router, module)`` hook.
"""

import importlib
import importlib.util
import inspect
import logging
import pkgutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from perch.controller import Controller
from perch.errors import ConfigurationError
from perch.routing.router import Router

logger = logging.getLogger("perch.modules")

CONTROLLERS_PACKAGE = "Controllers"
ROUTER_MODULE = "router"


def controller_path(namespace: str, module: str, name: str) -> str:
    """Qualified registry key for a controller class."""
    return f"{namespace}.Modules.{module}.{CONTROLLERS_PACKAGE}.{name}"


@dataclass(frozen=True, slots=True)
class ModuleInfo:
    """A loaded application module."""

    name: str
    path: Path | None = None
    package: str | None = None


class ControllerRegistry:
    """Controller classes keyed by their qualified path.

    Built while modules load, read-only once the app is frozen.
    """

    __slots__ = ("_classes", "namespace")

    def __init__(self, namespace: str = "app") -> None:
        self.namespace = namespace
        self._classes: dict[str, type[Controller]] = {}

    def add(self, module: str, cls: type[Controller], name: str | None = None) -> str:
        """Register *cls* for *module*; returns the qualified key."""
        if not (isinstance(cls, type) and issubclass(cls, Controller)):
            msg = f"{cls!r} is not a Controller subclass"
            raise ConfigurationError(msg)
        key = controller_path(self.namespace, module, name or cls.__name__)
        self._classes[key] = cls
        return key

    def lookup(self, module: str, name: str) -> type[Controller] | None:
        return self._classes.get(controller_path(self.namespace, module, name))

    def path_for(self, module: str, name: str) -> str:
        return controller_path(self.namespace, module, name)

    def __contains__(self, key: object) -> bool:
        return key in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)


def discover_modules(
    namespace: str,
    router: Router,
    registry: ControllerRegistry,
) -> list[ModuleInfo]:
    """Load every module under ``<namespace>.Modules``.

    Modules are processed in name order so route registration, and with
    it first-match-wins precedence, is deterministic.

    Raises:
        ConfigurationError: If ``<namespace>.Modules`` cannot be imported,
            or a module's ``router`` has no ``register`` function.
    """
    root_name = f"{namespace}.Modules"
    try:
        root = importlib.import_module(root_name)
    except ModuleNotFoundError as exc:
        if exc.name not in (namespace, root_name):
            raise
        msg = (
            f"Modules package {root_name!r} not found. "
            f"Create {namespace}/Modules/__init__.py or fix AppConfig.namespace."
        )
        raise ConfigurationError(msg) from exc

    search_path = getattr(root, "__path__", None)
    if search_path is None:
        msg = f"{root_name!r} is a module, not a package."
        raise ConfigurationError(msg)

    names = sorted(info.name for info in pkgutil.iter_modules(search_path) if info.ispkg)
    loaded: list[ModuleInfo] = []
    for name in names:
        package = f"{root_name}.{name}"
        pkg = importlib.import_module(package)
        info = ModuleInfo(name=name, path=_package_dir(pkg), package=package)

        count = load_controllers(info, registry)
        load_routes(info, router)
        logger.debug("Loaded module %s (%d controller(s))", name, count)
        loaded.append(info)

    logger.info("Discovered %d module(s) under %s", len(loaded), root_name)
    return loaded


def load_controllers(info: ModuleInfo, registry: ControllerRegistry) -> int:
    """Import ``<module>.Controllers`` and register the controllers defined there."""
    if info.package is None:
        return 0
    package = f"{info.package}.{CONTROLLERS_PACKAGE}"
    if importlib.util.find_spec(package) is None:
        return 0

    count = 0
    for mod in _walk(importlib.import_module(package)):
        for _, cls in inspect.getmembers(mod, inspect.isclass):
            if cls is Controller or cls.__module__ != mod.__name__:
                continue
            if issubclass(cls, Controller):
                registry.add(info.name, cls)
                count += 1
    return count


def load_routes(info: ModuleInfo, router: Router) -> bool:
    """Run the module's ``router.register(router, module)`` hook, if it has one."""
    if info.package is None:
        return False
    name = f"{info.package}.{ROUTER_MODULE}"
    if importlib.util.find_spec(name) is None:
        return False

    hook = getattr(importlib.import_module(name), "register", None)
    if not callable(hook):
        msg = f"{name} must define register(router, module)"
        raise ConfigurationError(msg)
    hook(router, info.name)
    return True


def _walk(package: ModuleType) -> Iterator[ModuleType]:
    yield package
    for sub in pkgutil.iter_modules(getattr(package, "__path__", [])):
        if not sub.ispkg:
            yield importlib.import_module(f"{package.__name__}.{sub.name}")


def _package_dir(pkg: ModuleType) -> Path | None:
    paths = list(getattr(pkg, "__path__", []))
    return Path(paths[0]) if paths else None
