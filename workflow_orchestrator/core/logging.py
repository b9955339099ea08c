"""Logging setup for the ``workflow_orchestrator.*`` logger tree.

Engine, queue and listener records carry their context as ``extra=`` fields
(``step``, ``message_id``, ``duration_seconds`` and so on). The formatters
here lift those fields out of the record so they stay searchable.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from workflow_orchestrator.core.config import OrchestratorSettings

PACKAGE_LOGGER = "workflow_orchestrator"

WORKFLOW_FIELDS = (
    "channel",
    "step",
    "queue",
    "message_id",
    "attempt",
    "attempts",
    "duration_seconds",
    "error_type",
    "error",
)

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}
_HANDLER_MARKER = "_workflow_orchestrator_handler"


def split_record_fields(record: logging.LogRecord) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Return ``(workflow_fields, other_extra)`` attached to ``record``."""

    attributes = record.__dict__
    workflow = {name: attributes[name] for name in WORKFLOW_FIELDS if name in attributes}
    extra = {
        key: value
        for key, value in attributes.items()
        if key not in _STANDARD_ATTRS and key not in workflow and not key.startswith("_")
    }
    return workflow, extra


class JsonFormatter(logging.Formatter):
    """One JSON document per record with workflow fields at the top level."""

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        workflow, extra = split_record_fields(record)
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
            **workflow,
        }
        if extra:
            log_entry["extra"] = extra
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class WorkflowTextFormatter(logging.Formatter):
    """``<time> <LEVEL> <logger> <event> key=value ...`` lines for local runs."""

    def format(self, record: logging.LogRecord) -> str:
        workflow, extra = split_record_fields(record)
        line = f"{self.formatTime(record)} {record.levelname} {record.name} {record.getMessage()}"
        pairs = " ".join(f"{key}={value}" for key, value in {**workflow, **extra}.items())
        if pairs:
            line = f"{line} {pairs}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(settings: OrchestratorSettings) -> logging.Logger:
    """Install one stdout handler on the package logger; repeated calls replace it."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if getattr(h, _HANDLER_MARKER, False)]:
        logger.removeHandler(existing)

    handler = logging.StreamHandler(stream=sys.stdout)
    setattr(handler, _HANDLER_MARKER, True)
    if settings.log_json:
        handler.setFormatter(JsonFormatter(settings.service_name, settings.environment))
    else:
        handler.setFormatter(WorkflowTextFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.propagate = settings.log_propagate
    return logger
