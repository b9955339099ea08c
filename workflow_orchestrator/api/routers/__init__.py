"""Router registrations."""

from fastapi import APIRouter

from workflow_orchestrator.api.routers import health, queues, workflows


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(workflows.router, prefix="/api/v1/workflows", tags=["workflows"])
    router.include_router(queues.router, prefix="/api/v1/queues", tags=["queues"])
    return router
