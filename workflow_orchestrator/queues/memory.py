"""Process-local queue backend."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Condition
from typing import Deque, Dict, List, Optional

from workflow_orchestrator.queues.base import WorkflowQueue
from workflow_orchestrator.workflow_engine.message import WorkflowMessage


@dataclass(eq=False)
class InMemoryQueue(WorkflowQueue):
    """Thread-safe named FIFO queues kept in process memory.

    Messages are stored by reference and lost when the process exits.
    """

    def __post_init__(self) -> None:
        self._queues: Dict[str, Deque[WorkflowMessage]] = {}
        self._condition = Condition()

    def push(self, queue: str, message: WorkflowMessage) -> None:
        with self._condition:
            self._queues.setdefault(queue, deque()).append(message)
            self._condition.notify_all()

    def pop(self, queue: str) -> Optional[WorkflowMessage]:
        with self._condition:
            return self._pop_locked(queue)

    def size(self, queue: str) -> int:
        with self._condition:
            return len(self._queues.get(queue, ()))

    def clear(self, queue: str) -> None:
        with self._condition:
            self._queues.pop(queue, None)

    def peek(self, queue: str) -> Optional[WorkflowMessage]:
        with self._condition:
            items = self._queues.get(queue)
            return items[0] if items else None

    def blocking_pop(self, queue: str, timeout: float = 0) -> Optional[WorkflowMessage]:
        deadline = time.monotonic() + max(timeout, 0)
        with self._condition:
            while True:
                message = self._pop_locked(queue)
                if message is not None:
                    return message
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._condition.wait(remaining)

    def queue_names(self) -> List[str]:
        with self._condition:
            return sorted(name for name, items in self._queues.items() if items)

    def _pop_locked(self, queue: str) -> Optional[WorkflowMessage]:
        items = self._queues.get(queue)
        if not items:
            return None
        return items.popleft()
