"""Pydantic schemas for the workflow and queue endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from workflow_orchestrator.workflow_engine.engine import Completed, WorkflowResult
from workflow_orchestrator.workflow_engine.message import WorkflowMessage


class WorkflowExecuteRequest(BaseModel):
    """Inbound payload for starting a workflow."""

    payload: Any = Field(default=None)
    headers: Dict[str, Any] = Field(default_factory=dict)


class WorkflowResultResponse(BaseModel):
    """Outcome of a workflow run or of one async step."""

    status: Literal["completed", "suspended"]
    payload: Any = None
    message_id: Optional[str] = None
    queue: Optional[str] = None

    @classmethod
    def from_result(cls, result: WorkflowResult) -> "WorkflowResultResponse":
        if isinstance(result, Completed):
            return cls(status="completed", payload=result.payload)
        return cls(status="suspended", message_id=result.message_id, queue=result.queue)


class ProcessAsyncStepRequest(BaseModel):
    max_retries: Optional[int] = Field(default=None, ge=0)


class ProcessAsyncStepResponse(BaseModel):
    """``processed`` is false when the queue was empty or the message was re-queued."""

    processed: bool
    result: Optional[WorkflowResultResponse] = None


class QueuedMessageResponse(BaseModel):
    id: str
    payload: Any
    steps: List[str]
    headers: Dict[str, Any]

    @classmethod
    def from_message(cls, message: WorkflowMessage) -> "QueuedMessageResponse":
        return cls(**message.to_dict())


class QueueSummaryResponse(BaseModel):
    name: str
    size: int


class QueueDetailResponse(QueueSummaryResponse):
    head: Optional[QueuedMessageResponse] = None
