"""JSON wire format for messages stored by durable queue backends.

Payloads and header values must be plain JSON (``dict`` with string keys,
``list``/``tuple``, ``str``, numbers, booleans, ``None``); tuples come back as
lists. A dataclass or pydantic model payload is stored with a ``payload_type``
tag and rebuilt on decode, but only for classes registered with
``register_payload_type``. Decoding never imports anything: an unknown tag is
a ``MessageDecodeError``.
"""

from __future__ import annotations

import dataclasses
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from workflow_orchestrator.workflow_engine.errors import MessageDecodeError, MessageEncodeError
from workflow_orchestrator.workflow_engine.message import WorkflowMessage

T = TypeVar("T")

_JSON_SCALARS = (str, int, float, bool, type(None))

_payload_types: Dict[str, TypeAdapter] = {}
_payload_tags: Dict[type, str] = {}
_registry_lock = Lock()


class MessageEnvelope(BaseModel):
    """Record persisted for each queued message."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    payload: Any = Field(...)
    payload_type: Optional[str] = Field(default=None)
    steps: List[str] = Field(default_factory=list)
    headers: Dict[str, Any] = Field(default_factory=dict)


def payload_type_tag(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def register_payload_type(cls: Type[T]) -> Type[T]:
    """Allow ``cls`` (a dataclass or pydantic model) as a queued payload.

    Usable as a class decorator.
    """

    if not (dataclasses.is_dataclass(cls) or (isinstance(cls, type) and issubclass(cls, BaseModel))):
        raise TypeError(f"{cls!r} is not a dataclass or pydantic model")
    tag = payload_type_tag(cls)
    with _registry_lock:
        _payload_types[tag] = TypeAdapter(cls)
        _payload_tags[cls] = tag
    return cls


def _ensure_json_native(value: Any, path: str) -> None:
    if isinstance(value, _JSON_SCALARS):
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _ensure_json_native(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise MessageEncodeError(f"{path} has a non-string key {key!r}")
            _ensure_json_native(item, f"{path}.{key}")
        return
    raise MessageEncodeError(
        f"{path} of type {type(value).__qualname__} is not JSON-native; "
        "register the payload class with register_payload_type"
    )


def _encode_payload(payload: Any, message_id: str) -> Tuple[Any, Optional[str]]:
    tag = _payload_tags.get(type(payload))
    if tag is not None:
        try:
            return _payload_types[tag].dump_python(payload, mode="json"), tag
        except PydanticSerializationError as exc:
            raise MessageEncodeError(f"Message {message_id} payload cannot be serialized: {exc}") from exc
    _ensure_json_native(payload, "payload")
    return payload, None


def encode_message(message: WorkflowMessage) -> str:
    payload, tag = _encode_payload(message.payload, message.id)
    _ensure_json_native(message.all_headers(), "headers")
    envelope = MessageEnvelope(
        id=message.id,
        payload=payload,
        payload_type=tag,
        steps=list(message.steps),
        headers=message.all_headers(),
    )
    try:
        return envelope.model_dump_json()
    except PydanticSerializationError as exc:
        raise MessageEncodeError(f"Message {message.id} is not JSON serializable: {exc}") from exc


def decode_message(raw: str | bytes) -> WorkflowMessage:
    try:
        envelope = MessageEnvelope.model_validate_json(raw)
    except ValidationError as exc:
        raise MessageDecodeError(f"Invalid queued message record: {exc}") from exc

    payload = envelope.payload
    if envelope.payload_type is not None:
        adapter = _payload_types.get(envelope.payload_type)
        if adapter is None:
            raise MessageDecodeError(
                f"Message {envelope.id} carries unregistered payload type {envelope.payload_type!r}"
            )
        try:
            payload = adapter.validate_python(payload)
        except ValidationError as exc:
            raise MessageDecodeError(
                f"Message {envelope.id} payload does not match {envelope.payload_type}: {exc}"
            ) from exc

    return WorkflowMessage(
        payload=payload,
        steps=tuple(envelope.steps),
        headers=envelope.headers,
        id=envelope.id,
    )
