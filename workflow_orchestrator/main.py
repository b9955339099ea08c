"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from workflow_orchestrator.api.error_handlers import register_exception_handlers
from workflow_orchestrator.api.routers import get_api_router
from workflow_orchestrator.core.config import OrchestratorSettings, get_settings
from workflow_orchestrator.core.logging import configure_logging
from workflow_orchestrator.facade import WorkflowOrchestrator


def create_app(
    orchestrator: WorkflowOrchestrator | None = None,
    settings: OrchestratorSettings | None = None,
) -> FastAPI:
    """Application factory serving the given orchestrator over HTTP."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Workflow Orchestrator",
        version="1.0.0",
    )
    app.state.orchestrator = orchestrator or WorkflowOrchestrator.create(settings)

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app
