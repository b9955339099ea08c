"""Durable queue backend stored in a SQL table."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Connection, Engine

from workflow_orchestrator.models.queue_item import build_queue_table
from workflow_orchestrator.queues.base import WorkflowQueue
from workflow_orchestrator.queues.codec import decode_message, encode_message
from workflow_orchestrator.workflow_engine.message import WorkflowMessage

LOGGER = logging.getLogger("workflow_orchestrator.queues.database")


class SqlQueue(WorkflowQueue):
    """Queue rows ordered by ``created_at`` then autoincrement ``id``.

    Each ``pop`` reads and deletes the head row inside one transaction, so a
    failure in between leaves the message in place.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        table_name: str = "workflow_queue",
        poll_interval: float = 0.1,
    ) -> None:
        self._engine = engine
        self._table = build_queue_table(table_name)
        self._poll_interval = poll_interval
        self._table.metadata.create_all(bind=engine)

    @property
    def table_name(self) -> str:
        return self._table.name

    def push(self, queue: str, message: WorkflowMessage) -> None:
        data = encode_message(message)
        with self._engine.begin() as connection:
            connection.execute(
                insert(self._table).values(
                    queue_name=queue,
                    message_data=data,
                    created_at=datetime.now(timezone.utc),
                )
            )
        LOGGER.debug("queue_message_pushed", extra={"queue": queue, "message_id": message.id})

    def pop(self, queue: str) -> Optional[WorkflowMessage]:
        while True:
            with self._engine.begin() as connection:
                row = self._head(connection, queue)
                if row is None:
                    return None
                deleted = connection.execute(delete(self._table).where(self._table.c.id == row.id))
            # Zero rows deleted means another consumer claimed this head first.
            if deleted.rowcount == 1:
                return decode_message(row.message_data)

    def size(self, queue: str) -> int:
        with self._engine.connect() as connection:
            count = connection.scalar(
                select(func.count()).select_from(self._table).where(self._table.c.queue_name == queue)
            )
        return int(count or 0)

    def clear(self, queue: str) -> None:
        with self._engine.begin() as connection:
            connection.execute(delete(self._table).where(self._table.c.queue_name == queue))

    def peek(self, queue: str) -> Optional[WorkflowMessage]:
        with self._engine.connect() as connection:
            row = self._head(connection, queue)
        if row is None:
            return None
        return decode_message(row.message_data)

    def blocking_pop(self, queue: str, timeout: float = 0) -> Optional[WorkflowMessage]:
        deadline = time.monotonic() + max(timeout, 0)
        while True:
            message = self.pop(queue)
            if message is not None:
                return message
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None
            time.sleep(min(self._poll_interval, remaining))

    def queue_names(self) -> List[str]:
        with self._engine.connect() as connection:
            names = connection.scalars(
                select(self._table.c.queue_name).distinct().order_by(self._table.c.queue_name)
            )
            return list(names)

    def _head(self, connection: Connection, queue: str):
        return connection.execute(
            select(self._table.c.id, self._table.c.message_data)
            .where(self._table.c.queue_name == queue)
            .order_by(self._table.c.created_at.asc(), self._table.c.id.asc())
            .limit(1)
        ).first()
