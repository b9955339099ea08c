"""Pydantic schemas for API payloads."""

from workflow_orchestrator.schemas.workflow import (
    ProcessAsyncStepRequest,
    ProcessAsyncStepResponse,
    QueueDetailResponse,
    QueuedMessageResponse,
    QueueSummaryResponse,
    WorkflowExecuteRequest,
    WorkflowResultResponse,
)

__all__ = [
    "ProcessAsyncStepRequest",
    "ProcessAsyncStepResponse",
    "QueueDetailResponse",
    "QueueSummaryResponse",
    "QueuedMessageResponse",
    "WorkflowExecuteRequest",
    "WorkflowResultResponse",
]
