"""In-process workflow orchestration with pluggable async queues."""

from workflow_orchestrator.facade import WorkflowOrchestrator
from workflow_orchestrator.main import create_app
from workflow_orchestrator.queues import register_payload_type
from workflow_orchestrator.workflow_engine import (
    Completed,
    HandlerRegistry,
    Header,
    SimpleContainer,
    Suspended,
    WorkflowEngine,
    WorkflowMessage,
    WorkflowResult,
    handler,
    orchestrator,
)

__all__ = [
    "Completed",
    "HandlerRegistry",
    "Header",
    "SimpleContainer",
    "Suspended",
    "WorkflowEngine",
    "WorkflowMessage",
    "WorkflowOrchestrator",
    "WorkflowResult",
    "create_app",
    "handler",
    "orchestrator",
    "register_payload_type",
]
