"""Binding of handler and orchestrator parameters to message data.

Each declared parameter is resolved in a fixed order:

1. ``Annotated[T, Header("name")]`` parameters receive the named header
   (falling back to the parameter default, or ``None``).
2. Parameters annotated with an application class receive the payload when it
   is an instance of that class, otherwise an instance from the container.
   Anything else raises ``UnresolvedParameterError``.
3. Untyped and builtin-typed parameters receive the payload as-is, as do
   ``typing`` constructs such as ``Any`` and classes ``isinstance`` rejects
   (protocols that are not runtime checkable, for example).

String annotations are evaluated one parameter at a time, so a name that only
exists under ``TYPE_CHECKING`` is read as ``Any`` for that parameter alone;
the ``Header`` marker around it still applies.
"""

from __future__ import annotations

import builtins
import inspect
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    get_args,
    get_origin,
)

from workflow_orchestrator.workflow_engine.container import Container
from workflow_orchestrator.workflow_engine.errors import UnresolvedParameterError
from workflow_orchestrator.workflow_engine.message import WorkflowMessage

LOGGER = logging.getLogger("workflow_orchestrator.workflow_engine.resolution")

_EMPTY = inspect.Parameter.empty
_PAYLOAD_MODULES = frozenset({"builtins", "typing", "typing_extensions", "collections.abc"})


@dataclass(frozen=True)
class Header:
    """Parameter marker binding the argument to a message header."""

    name: str


@dataclass(frozen=True)
class ParameterBinding:
    name: str
    keyword_only: bool = False
    header: Optional[str] = None
    application_type: Optional[type] = None
    default: Any = None


def _is_application_type(annotation: Any) -> bool:
    if annotation is Any or annotation is _EMPTY or not inspect.isclass(annotation):
        return False
    if annotation.__module__ in _PAYLOAD_MODULES:
        return False
    try:
        isinstance(None, annotation)
    except TypeError:
        return False
    return True


class _LenientNamespace(dict):
    """Lookup used for string annotations: unknown names evaluate to ``Any``."""

    def __init__(self, namespace: Dict[str, Any]) -> None:
        super().__init__()
        self._namespace = namespace

    def __missing__(self, key: str) -> Any:
        if key in self._namespace:
            return self._namespace[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        return Any


def _evaluate_annotation(function: Callable[..., Any], parameter: inspect.Parameter) -> Any:
    annotation = parameter.annotation
    if not isinstance(annotation, str):
        return annotation
    namespace = getattr(inspect.unwrap(function), "__globals__", {})
    try:
        return eval(annotation, namespace)  # noqa: S307
    except NameError as exc:
        LOGGER.debug(
            "parameter_annotation_unresolved",
            extra={
                "function": getattr(function, "__qualname__", repr(function)),
                "parameter": parameter.name,
                "annotation": annotation,
                "error": str(exc),
            },
        )
    try:
        return eval(annotation, namespace, _LenientNamespace(namespace))  # noqa: S307
    except (NameError, AttributeError, TypeError):
        return _EMPTY


def _binding_for(parameter: inspect.Parameter, annotation: Any) -> ParameterBinding:
    default = None if parameter.default is _EMPTY else parameter.default
    keyword_only = parameter.kind is inspect.Parameter.KEYWORD_ONLY
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        for marker in metadata:
            if isinstance(marker, Header):
                return ParameterBinding(
                    name=parameter.name,
                    keyword_only=keyword_only,
                    header=marker.name,
                    default=default,
                )
        annotation = base
    if _is_application_type(annotation):
        return ParameterBinding(
            name=parameter.name,
            keyword_only=keyword_only,
            application_type=annotation,
            default=default,
        )
    return ParameterBinding(name=parameter.name, keyword_only=keyword_only, default=default)


@lru_cache(maxsize=None)
def bindings_for(function: Callable[..., Any]) -> Tuple[ParameterBinding, ...]:
    """Describe how each parameter of ``function`` is resolved (cached per function)."""

    signature = inspect.signature(function)
    bindings: List[ParameterBinding] = []
    for parameter in signature.parameters.values():
        if parameter.name == "self" or parameter.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue
        bindings.append(_binding_for(parameter, _evaluate_annotation(function, parameter)))
    return tuple(bindings)


def resolve_header(binding: ParameterBinding, message: Optional[WorkflowMessage]) -> Any:
    if message is None:
        return binding.default
    return message.get_header(binding.header, binding.default)


def resolve_typed(
    binding: ParameterBinding,
    payload: Any,
    container: Container,
    *,
    step: Optional[str] = None,
) -> Any:
    expected = binding.application_type
    if isinstance(payload, expected):
        return payload
    if container.has(expected):
        return container.get(expected)
    raise UnresolvedParameterError(binding.name, expected.__qualname__, step=step)


def resolve_payload(binding: ParameterBinding, payload: Any) -> Any:
    return payload


def resolve_arguments(
    function: Callable[..., Any],
    payload: Any,
    container: Container,
    message: Optional[WorkflowMessage] = None,
    *,
    step: Optional[str] = None,
) -> Tuple[List[Any], Dict[str, Any]]:
    """Return the positional and keyword arguments for calling ``function``."""

    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for binding in bindings_for(function):
        if binding.header is not None:
            value = resolve_header(binding, message)
        elif binding.application_type is not None:
            value = resolve_typed(binding, payload, container, step=step)
        else:
            value = resolve_payload(binding, payload)

        if binding.keyword_only:
            kwargs[binding.name] = value
        else:
            args.append(value)
    return args, kwargs
