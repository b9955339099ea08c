"""Immutable message carried through a workflow run."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from uuid import uuid4

from workflow_orchestrator.workflow_engine.errors import MessageDecodeError


def generate_message_id() -> str:
    return f"wf_{uuid4().hex}"


@dataclass(frozen=True)
class WorkflowMessage:
    """Payload, remaining steps and headers of one in-flight workflow.

    Every ``with_*`` method returns a new message with the same ``id``; the
    receiver is never modified.
    """

    payload: Any
    steps: Tuple[str, ...] = ()
    headers: Mapping[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=generate_message_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if not self.id:
            object.__setattr__(self, "id", generate_message_id())

    @property
    def next_step(self) -> Optional[str]:
        return self.steps[0] if self.steps else None

    def has_more_steps(self) -> bool:
        return bool(self.steps)

    def with_payload(self, payload: Any) -> "WorkflowMessage":
        return replace(self, payload=payload)

    def without_first_step(self) -> "WorkflowMessage":
        return replace(self, steps=self.steps[1:])

    def with_steps(self, steps: Iterable[str]) -> "WorkflowMessage":
        return replace(self, steps=tuple(steps))

    def get_header(self, key: str, default: Any = None) -> Any:
        value = self.headers.get(key)
        return default if value is None else value

    def with_header(self, key: str, value: Any) -> "WorkflowMessage":
        return self.with_headers({key: value})

    def with_headers(self, headers: Mapping[str, Any]) -> "WorkflowMessage":
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def all_headers(self) -> Dict[str, Any]:
        return dict(self.headers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "payload": self.payload,
            "steps": list(self.steps),
            "headers": dict(self.headers),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowMessage":
        if "payload" not in data:
            raise MessageDecodeError("Message record is missing the 'payload' field")
        return cls(
            payload=data["payload"],
            steps=tuple(data.get("steps") or ()),
            headers=dict(data.get("headers") or {}),
            id=str(data.get("id") or ""),
        )
