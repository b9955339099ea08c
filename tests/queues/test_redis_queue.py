import json

import httpx
import pytest

from workflow_orchestrator.queues import RedisQueue
from workflow_orchestrator.workflow_engine.message import WorkflowMessage


def test_uses_prefixed_list_keys(redis_queue, fake_upstash) -> None:
    message = WorkflowMessage({"id": "ORD-1"})
    redis_queue.push("orders", message)

    command, key, raw = fake_upstash.commands[-1]

    assert command == "RPUSH"
    assert key == "workflow_queue:orders"
    assert json.loads(raw)["id"] == message.id


def test_blocking_pop_sends_timeout_to_blpop(redis_queue, fake_upstash) -> None:
    redis_queue.push("orders", WorkflowMessage("A"))

    assert redis_queue.blocking_pop("orders", timeout=2).payload == "A"
    assert fake_upstash.commands[-1] == ["BLPOP", "workflow_queue:orders", "2"]


def test_non_positive_timeout_uses_plain_pop(redis_queue, fake_upstash) -> None:
    assert redis_queue.blocking_pop("orders", timeout=0) is None
    assert fake_upstash.commands[-1] == ["LPOP", "workflow_queue:orders"]


def test_queue_names_strip_prefix(fake_upstash) -> None:
    client = httpx.Client(
        base_url="http://redis.test",
        headers={"Authorization": "Bearer test-token"},
        transport=httpx.MockTransport(fake_upstash.handle),
    )
    queue = RedisQueue(url="http://redis.test", token="test-token", prefix="jobs:", client=client)
    queue.push("emails", WorkflowMessage("E"))
    queue.push("orders", WorkflowMessage("O"))

    assert queue.queue_names() == ["emails", "orders"]
    assert set(fake_upstash.lists) == {"jobs:emails", "jobs:orders"}


def test_http_errors_propagate() -> None:
    client = httpx.Client(
        base_url="http://redis.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "boom"})),
    )
    queue = RedisQueue(url="http://redis.test", token="unused", client=client)

    with pytest.raises(httpx.HTTPStatusError):
        queue.size("orders")
