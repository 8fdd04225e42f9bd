"""Service container.

Maps keys (usually a type or a dotted string) to factories. Each app owns
one container; controllers reach it through ``self.service(key)``.

Usage::

    container = ServiceContainer()
    container.singleton(UserRepository, lambda c: UserRepository(c.resolve("db")))
    container.register("mailer", lambda c: Mailer())
    container.instance("db", Database(url))

    repo = container.resolve(UserRepository)   # same object every time
    mailer = container.resolve("mailer")        # new object every time
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from perch.errors import UnknownServiceError

type Factory = Callable[[ServiceContainer], Any]

_UNSET = object()


class ServiceContainer:
    """Factories and lazily created singletons, keyed by any hashable.

    Singletons take precedence over plain factories registered under the
    same key. Singleton creation is serialised so concurrent first
    resolves build the object exactly once.
    """

    __slots__ = ("_factories", "_instances", "_lock", "_singletons")

    def __init__(self) -> None:
        self._factories: dict[Any, Factory] = {}
        self._singletons: dict[Any, Factory] = {}
        self._instances: dict[Any, Any] = {}
        self._lock = threading.RLock()

    def register(self, key: Any, factory: Factory) -> None:
        """Bind *key* to *factory*; every ``resolve`` calls it again."""
        self._factories[key] = factory

    def singleton(self, key: Any, factory: Factory) -> None:
        """Bind *key* to *factory*; the first ``resolve`` caches the result."""
        self._singletons[key] = factory
        self._instances.pop(key, None)

    def instance(self, key: Any, obj: Any) -> None:
        """Bind *key* to an already-built object."""
        self._singletons[key] = lambda _container: obj
        self._instances[key] = obj

    def resolve(self, key: Any) -> Any:
        """Return the service for *key*.

        Raises:
            UnknownServiceError: If nothing is registered under *key*.
        """
        if key in self._singletons:
            found = self._instances.get(key, _UNSET)
            if found is not _UNSET:
                return found
            with self._lock:
                found = self._instances.get(key, _UNSET)
                if found is _UNSET:
                    found = self._singletons[key](self)
                    self._instances[key] = found
            return found

        factory = self._factories.get(key)
        if factory is None:
            raise UnknownServiceError(key)
        return factory(self)

    def has(self, key: Any) -> bool:
        return key in self._singletons or key in self._factories

    def __contains__(self, key: object) -> bool:
        return self.has(key)
