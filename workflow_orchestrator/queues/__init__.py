"""Queue backends for deferred workflow steps."""

from __future__ import annotations

from typing import Optional

from workflow_orchestrator.core.config import OrchestratorSettings, get_settings
from workflow_orchestrator.queues.base import WorkflowQueue
from workflow_orchestrator.queues.codec import (
    MessageEnvelope,
    decode_message,
    encode_message,
    register_payload_type,
)
from workflow_orchestrator.queues.database import SqlQueue
from workflow_orchestrator.queues.memory import InMemoryQueue
from workflow_orchestrator.queues.redis import RedisQueue

__all__ = [
    "InMemoryQueue",
    "MessageEnvelope",
    "QueueConfigurationError",
    "RedisQueue",
    "SqlQueue",
    "WorkflowQueue",
    "decode_message",
    "encode_message",
    "get_workflow_queue",
    "register_payload_type",
]


class QueueConfigurationError(RuntimeError):
    """Raised when the configured queue backend is missing required settings."""


def get_workflow_queue(settings: Optional[OrchestratorSettings] = None) -> WorkflowQueue:
    """Build the queue backend selected by ``settings.queue_backend``."""

    settings = settings or get_settings()

    if settings.queue_backend == "redis":
        if not (settings.redis_url and settings.redis_token):
            raise QueueConfigurationError("Redis queue backend requires WFO_REDIS_URL and WFO_REDIS_TOKEN")
        return RedisQueue(
            url=settings.redis_url,
            token=settings.redis_token,
            prefix=settings.redis_queue_prefix,
            timeout=settings.redis_timeout,
        )

    if settings.queue_backend == "database":
        from workflow_orchestrator.core.database import get_engine

        return SqlQueue(
            get_engine(settings),
            table_name=settings.queue_table,
            poll_interval=settings.queue_poll_interval,
        )

    return InMemoryQueue()
