"""SQLAlchemy table definitions for the durable queue."""

from workflow_orchestrator.models.queue_item import (  # noqa: F401
    InvalidQueueTableError,
    build_queue_table,
    validate_table_name,
)
