"""Workflow execution endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from workflow_orchestrator.api.dependencies import get_orchestrator
from workflow_orchestrator.facade import WorkflowOrchestrator
from workflow_orchestrator.schemas.workflow import WorkflowExecuteRequest, WorkflowResultResponse

router = APIRouter()


@router.get("", summary="List registered workflow channels")
def list_channels(orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)) -> dict[str, list[str]]:
    registry = orchestrator.registry
    return {
        "orchestrators": registry.orchestrator_channels(),
        "handlers": registry.handler_channels(),
    }


@router.post(
    "/{channel}",
    response_model=WorkflowResultResponse,
    summary="Run a workflow",
    responses={status.HTTP_202_ACCEPTED: {"model": WorkflowResultResponse}},
)
def execute_workflow(
    channel: str,
    request: WorkflowExecuteRequest,
    response: Response,
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
) -> WorkflowResultResponse:
    result = orchestrator.execute(channel, request.payload, request.headers)
    if result.is_suspended:
        response.status_code = status.HTTP_202_ACCEPTED
    return WorkflowResultResponse.from_result(result)
