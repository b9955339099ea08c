"""Minimal service container used to instantiate workflow classes."""

from __future__ import annotations

import inspect
from threading import RLock
from typing import Any, Callable, Dict, Hashable, Protocol


class ServiceNotFoundError(LookupError):
    """Raised when the container cannot provide an identifier."""

    def __init__(self, identifier: Hashable) -> None:
        super().__init__(f"Service not found: {_describe(identifier)}")
        self.identifier = identifier


class Container(Protocol):
    """Contract the engine needs from a dependency-injection container."""

    def has(self, identifier: Hashable) -> bool:
        ...

    def get(self, identifier: Hashable) -> Any:
        ...


def _describe(identifier: Hashable) -> str:
    if inspect.isclass(identifier):
        return f"{identifier.__module__}.{identifier.__qualname__}"
    return str(identifier)


def _can_auto_construct(identifier: Hashable) -> bool:
    if not inspect.isclass(identifier):
        return False
    try:
        signature = inspect.signature(identifier)
    except (TypeError, ValueError):
        return False
    return all(
        parameter.default is not inspect.Parameter.empty
        or parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for parameter in signature.parameters.values()
    )


class SimpleContainer:
    """Instances, lazily-invoked factories, and zero-argument auto-construction."""

    def __init__(self) -> None:
        self._instances: Dict[Hashable, Any] = {}
        self._factories: Dict[Hashable, Callable[[], Any]] = {}
        self._lock = RLock()

    def set(self, identifier: Hashable, value: Any) -> None:
        """Bind an instance, or a factory when ``value`` is a function or lambda."""

        with self._lock:
            if inspect.isroutine(value):
                self._factories[identifier] = value
                self._instances.pop(identifier, None)
            else:
                self._instances[identifier] = value
                self._factories.pop(identifier, None)

    def get(self, identifier: Hashable) -> Any:
        with self._lock:
            if identifier in self._instances:
                return self._instances[identifier]

            factory = self._factories.get(identifier)
            if factory is not None:
                instance = factory()
                self._instances[identifier] = instance
                del self._factories[identifier]
                return instance

            if _can_auto_construct(identifier):
                instance = identifier()  # type: ignore[operator]
                self._instances[identifier] = instance
                return instance

        raise ServiceNotFoundError(identifier)

    def has(self, identifier: Hashable) -> bool:
        with self._lock:
            return (
                identifier in self._instances
                or identifier in self._factories
                or _can_auto_construct(identifier)
            )
