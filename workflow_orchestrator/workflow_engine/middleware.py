"""Middleware chain applied once at workflow entry."""

from __future__ import annotations

from typing import Callable, Sequence

from workflow_orchestrator.workflow_engine.message import WorkflowMessage

Next = Callable[[WorkflowMessage], WorkflowMessage]
Middleware = Callable[[WorkflowMessage, Next], WorkflowMessage]


def run_chain(middleware: Sequence[Middleware], index: int, message: WorkflowMessage) -> WorkflowMessage:
    """Run ``middleware[index:]`` around ``message`` in registration order.

    A middleware continues the chain by calling ``next(message)``; returning
    without calling it short-circuits the remaining middleware.
    """

    if index >= len(middleware):
        return message

    def call_next(next_message: WorkflowMessage) -> WorkflowMessage:
        return run_chain(middleware, index + 1, next_message)

    return middleware[index](message, call_next)
