"""Queue inspection and async step processing endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status

from workflow_orchestrator.api.dependencies import get_orchestrator, get_queue
from workflow_orchestrator.facade import WorkflowOrchestrator
from workflow_orchestrator.queues import WorkflowQueue
from workflow_orchestrator.schemas.workflow import (
    ProcessAsyncStepRequest,
    ProcessAsyncStepResponse,
    QueueDetailResponse,
    QueuedMessageResponse,
    QueueSummaryResponse,
    WorkflowResultResponse,
)

router = APIRouter()


@router.get("", response_model=List[QueueSummaryResponse])
def list_queues(queue: WorkflowQueue = Depends(get_queue)) -> List[QueueSummaryResponse]:
    return [QueueSummaryResponse(name=name, size=queue.size(name)) for name in queue.queue_names()]


@router.get("/{name}", response_model=QueueDetailResponse)
def get_queue_detail(name: str, queue: WorkflowQueue = Depends(get_queue)) -> QueueDetailResponse:
    head = queue.peek(name)
    return QueueDetailResponse(
        name=name,
        size=queue.size(name),
        head=QueuedMessageResponse.from_message(head) if head is not None else None,
    )


@router.post("/{name}/process", response_model=ProcessAsyncStepResponse)
def process_async_step(
    name: str,
    request: Optional[ProcessAsyncStepRequest] = Body(default=None),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
) -> ProcessAsyncStepResponse:
    max_retries = request.max_retries if request is not None else None
    result = orchestrator.process_async_step(name, max_retries)
    if result is None:
        return ProcessAsyncStepResponse(processed=False)
    return ProcessAsyncStepResponse(processed=True, result=WorkflowResultResponse.from_result(result))


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def clear_queue(name: str, queue: WorkflowQueue = Depends(get_queue)) -> None:
    queue.clear(name)
