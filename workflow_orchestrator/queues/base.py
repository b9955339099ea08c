"""Queue contract shared by every backend."""

from __future__ import annotations

from typing import List, Optional, Protocol

from workflow_orchestrator.workflow_engine.message import WorkflowMessage


class WorkflowQueue(Protocol):
    """Named FIFO queues holding messages for deferred steps.

    ``pop`` and ``peek`` return ``None`` for an empty queue and never block;
    ``blocking_pop`` waits at most ``timeout`` seconds.
    """

    def push(self, queue: str, message: WorkflowMessage) -> None:
        ...

    def pop(self, queue: str) -> Optional[WorkflowMessage]:
        ...

    def size(self, queue: str) -> int:
        ...

    def clear(self, queue: str) -> None:
        ...

    def peek(self, queue: str) -> Optional[WorkflowMessage]:
        ...

    def blocking_pop(self, queue: str, timeout: float = 0) -> Optional[WorkflowMessage]:
        ...

    def queue_names(self) -> List[str]:
        ...
