"""Shared queue backend on Redis lists via the Upstash REST API."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, cast

import httpx

from workflow_orchestrator.queues.base import WorkflowQueue
from workflow_orchestrator.queues.codec import decode_message, encode_message
from workflow_orchestrator.workflow_engine.message import WorkflowMessage

LOGGER = logging.getLogger("workflow_orchestrator.queues.redis")


class RedisQueue(WorkflowQueue):
    """One Redis list per queue name, keyed ``<prefix><queue>``.

    Messages are appended with ``RPUSH`` and taken with ``LPOP``/``BLPOP``.
    """

    def __init__(
        self,
        *,
        url: str,
        token: str,
        prefix: str = "workflow_queue:",
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        self._timeout = timeout
        self._prefix = prefix

    def push(self, queue: str, message: WorkflowMessage) -> None:
        self._execute("RPUSH", self._queue_key(queue), encode_message(message))
        LOGGER.debug("queue_message_pushed", extra={"queue": queue, "message_id": message.id})

    def pop(self, queue: str) -> Optional[WorkflowMessage]:
        raw = self._execute("LPOP", self._queue_key(queue))
        if raw is None:
            return None
        return decode_message(cast(str, raw))

    def size(self, queue: str) -> int:
        return int(cast(int, self._execute("LLEN", self._queue_key(queue)) or 0))

    def clear(self, queue: str) -> None:
        self._execute("DEL", self._queue_key(queue))

    def peek(self, queue: str) -> Optional[WorkflowMessage]:
        raw = self._execute("LINDEX", self._queue_key(queue), "0")
        if raw is None:
            return None
        return decode_message(cast(str, raw))

    def blocking_pop(self, queue: str, timeout: float = 0) -> Optional[WorkflowMessage]:
        # BLPOP treats 0 as "wait forever"; a non-positive timeout here means "don't wait".
        if timeout <= 0:
            return self.pop(queue)

        result = self._execute(
            "BLPOP",
            self._queue_key(queue),
            f"{timeout:g}",
            request_timeout=self._timeout + timeout,
        )
        if not result:
            return None
        _key, raw = cast(Sequence[str], result)
        return decode_message(raw)

    def queue_names(self) -> List[str]:
        keys = cast(Sequence[str], self._execute("KEYS", f"{self._prefix}*") or [])
        return sorted(key[len(self._prefix):] for key in keys)

    def close(self) -> None:
        self._client.close()

    def _queue_key(self, queue: str) -> str:
        return f"{self._prefix}{queue}"

    def _execute(self, *command: str, request_timeout: Optional[float] = None) -> Optional[object]:
        if request_timeout is None:
            response = self._client.post("/", json=list(command))
        else:
            response = self._client.post("/", json=list(command), timeout=request_timeout)
        response.raise_for_status()
        payload = response.json()
        return payload.get("result")
