"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from fastapi import Request

from workflow_orchestrator.facade import WorkflowOrchestrator
from workflow_orchestrator.queues import WorkflowQueue


def get_orchestrator(request: Request) -> WorkflowOrchestrator:
    return request.app.state.orchestrator


def get_queue(request: Request) -> WorkflowQueue:
    return get_orchestrator(request).queue
