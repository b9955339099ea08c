"""Step lifecycle listeners."""

from __future__ import annotations

import logging
from typing import Protocol

from workflow_orchestrator.workflow_engine.message import WorkflowMessage


class EventListener(Protocol):
    """Receives step lifecycle notifications from the engine.

    Exceptions raised by a listener are not caught by the engine; they
    propagate to whoever called ``execute`` or ``process_async_step``.
    """

    def on_step_started(self, step: str, message: WorkflowMessage) -> None:
        ...

    def on_step_completed(self, step: str, message: WorkflowMessage, duration: float) -> None:
        ...

    def on_step_failed(
        self,
        step: str,
        message: WorkflowMessage,
        error: BaseException,
        duration: float,
    ) -> None:
        ...


class LoggingEventListener(EventListener):
    """Emits a structured log record for every step transition."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("workflow_orchestrator.workflow_engine.steps")

    def on_step_started(self, step: str, message: WorkflowMessage) -> None:
        self._logger.debug(
            "workflow_step_started",
            extra={"step": step, "message_id": message.id},
        )

    def on_step_completed(self, step: str, message: WorkflowMessage, duration: float) -> None:
        self._logger.info(
            "workflow_step_completed",
            extra={"step": step, "message_id": message.id, "duration_seconds": round(duration, 6)},
        )

    def on_step_failed(
        self,
        step: str,
        message: WorkflowMessage,
        error: BaseException,
        duration: float,
    ) -> None:
        self._logger.warning(
            "workflow_step_failed",
            extra={
                "step": step,
                "message_id": message.id,
                "duration_seconds": round(duration, 6),
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
