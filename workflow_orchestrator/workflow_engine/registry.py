"""Channel registry for orchestrators and step handlers."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, TypeVar, Union

from workflow_orchestrator.workflow_engine.errors import (
    InvalidChannelError,
    UnknownHandlerError,
    UnknownOrchestratorError,
)

F = TypeVar("F", bound=Callable[..., Any])

ORCHESTRATOR_ATTR = "__workflow_orchestrators__"
HANDLER_ATTR = "__workflow_handlers__"


def _require_channel(channel: str, kind: str) -> None:
    if not isinstance(channel, str) or channel.strip() == "":
        raise InvalidChannelError(f"{kind} channel name cannot be empty")


@dataclass(frozen=True)
class OrchestratorDeclaration:
    channel: str
    is_async: bool = False

    def __post_init__(self) -> None:
        _require_channel(self.channel, "Orchestrator")


@dataclass(frozen=True)
class HandlerDeclaration:
    channel: str
    is_async: bool = False
    returns_headers: bool = False
    timeout: float = 0.0

    def __post_init__(self) -> None:
        _require_channel(self.channel, "Handler")
        if self.timeout < 0:
            raise ValueError("Handler timeout cannot be negative")


@dataclass(frozen=True)
class OrchestratorDescriptor:
    """Binds a workflow entry channel to ``target.method``."""

    channel: str
    target: type
    method: str
    is_async: bool = False

    def __post_init__(self) -> None:
        _require_channel(self.channel, "Orchestrator")


@dataclass(frozen=True)
class HandlerDescriptor:
    """Binds a step channel to ``target.method`` with its execution flags."""

    channel: str
    target: type
    method: str
    is_async: bool = False
    returns_headers: bool = False
    timeout: float = 0.0

    def __post_init__(self) -> None:
        _require_channel(self.channel, "Handler")
        if self.timeout < 0:
            raise ValueError("Handler timeout cannot be negative")


def orchestrator(channel: str, *, is_async: bool = False) -> Callable[[F], F]:
    """Mark a method as the orchestrator for ``channel``."""

    declaration = OrchestratorDeclaration(channel=channel, is_async=is_async)

    def decorator(func: F) -> F:
        declarations = list(getattr(func, ORCHESTRATOR_ATTR, ()))
        declarations.append(declaration)
        setattr(func, ORCHESTRATOR_ATTR, tuple(declarations))
        return func

    return decorator


def handler(
    channel: str,
    *,
    is_async: bool = False,
    returns_headers: bool = False,
    timeout: float = 0.0,
) -> Callable[[F], F]:
    """Mark a method as the step handler for ``channel``."""

    declaration = HandlerDeclaration(
        channel=channel,
        is_async=is_async,
        returns_headers=returns_headers,
        timeout=timeout,
    )

    def decorator(func: F) -> F:
        declarations = list(getattr(func, HANDLER_ATTR, ()))
        declarations.append(declaration)
        setattr(func, HANDLER_ATTR, tuple(declarations))
        return func

    return decorator


class OrchestratorNotFoundError(UnknownOrchestratorError):
    """Raised by registry lookups for an unregistered orchestrator channel."""


class HandlerNotFoundError(UnknownHandlerError):
    """Raised by registry lookups for an unregistered handler channel."""


class HandlerRegistry:
    """Lookup table from channel name to orchestrator or handler descriptor.

    Orchestrators and handlers live in independent namespaces. Registering a
    channel again replaces the previous descriptor. Registration is expected
    to happen at startup; concurrent lookups afterwards are safe.
    """

    def __init__(self) -> None:
        self._orchestrators: Dict[str, OrchestratorDescriptor] = {}
        self._handlers: Dict[str, HandlerDescriptor] = {}

    def register_class(self, target: Union[type, object]) -> None:
        cls = target if inspect.isclass(target) else type(target)
        for method_name, member in inspect.getmembers(cls, inspect.isfunction):
            for declaration in getattr(member, ORCHESTRATOR_ATTR, ()):
                self.add_orchestrator(
                    OrchestratorDescriptor(
                        channel=declaration.channel,
                        target=cls,
                        method=method_name,
                        is_async=declaration.is_async,
                    )
                )
            for declaration in getattr(member, HANDLER_ATTR, ()):
                self.add_handler(
                    HandlerDescriptor(
                        channel=declaration.channel,
                        target=cls,
                        method=method_name,
                        is_async=declaration.is_async,
                        returns_headers=declaration.returns_headers,
                        timeout=declaration.timeout,
                    )
                )

    def add_orchestrator(self, descriptor: OrchestratorDescriptor) -> None:
        self._orchestrators[descriptor.channel] = descriptor

    def add_handler(self, descriptor: HandlerDescriptor) -> None:
        self._handlers[descriptor.channel] = descriptor

    def get_orchestrator(self, channel: str) -> OrchestratorDescriptor:
        try:
            return self._orchestrators[channel]
        except KeyError:
            raise OrchestratorNotFoundError(channel) from None

    def get_handler(self, channel: str) -> HandlerDescriptor:
        try:
            return self._handlers[channel]
        except KeyError:
            raise HandlerNotFoundError(channel) from None

    def has_orchestrator(self, channel: str) -> bool:
        return channel in self._orchestrators

    def has_handler(self, channel: str) -> bool:
        return channel in self._handlers

    def orchestrator_channels(self) -> List[str]:
        return sorted(self._orchestrators)

    def handler_channels(self) -> List[str]:
        return sorted(self._handlers)
