"""Workflow engine: registry, message model, and step execution."""

from __future__ import annotations

__all__ = [
    "Completed",
    "HandlerRegistry",
    "Header",
    "SimpleContainer",
    "Suspended",
    "WorkflowEngine",
    "WorkflowMessage",
    "WorkflowResult",
    "handler",
    "orchestrator",
]

from .container import SimpleContainer  # noqa: E402
from .engine import Completed, Suspended, WorkflowEngine, WorkflowResult  # noqa: E402
from .message import WorkflowMessage  # noqa: E402
from .registry import HandlerRegistry, handler, orchestrator  # noqa: E402
from .resolution import Header  # noqa: E402
