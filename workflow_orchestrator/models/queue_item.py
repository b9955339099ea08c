"""Table definition for queued workflow messages."""

from __future__ import annotations

import re

from sqlalchemy import Column, DateTime, Index, Integer, MetaData, String, Table, Text, func

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class InvalidQueueTableError(ValueError):
    """Raised when a queue table name is not a plain SQL identifier."""


def validate_table_name(table_name: str) -> str:
    if not isinstance(table_name, str) or not TABLE_NAME_PATTERN.fullmatch(table_name):
        raise InvalidQueueTableError(
            f"Invalid queue table name {table_name!r}: use letters, digits and underscores only"
        )
    return table_name


def build_queue_table(table_name: str, metadata: MetaData | None = None) -> Table:
    """Describe the queue table; the name is validated before any DDL uses it."""

    table_name = validate_table_name(table_name)
    metadata = metadata or MetaData()
    return Table(
        table_name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("queue_name", String(length=255), nullable=False),
        Column("message_data", Text, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
        Index(f"ix_{table_name}_queue_created", "queue_name", "created_at"),
        sqlite_autoincrement=True,
    )
