import pytest

from workflow_orchestrator.core.config import OrchestratorSettings
from workflow_orchestrator.queues import (
    InMemoryQueue,
    QueueConfigurationError,
    RedisQueue,
    SqlQueue,
    get_workflow_queue,
)


def test_memory_backend_is_default() -> None:
    assert isinstance(get_workflow_queue(OrchestratorSettings(queue_backend="memory")), InMemoryQueue)


def test_database_backend_uses_configured_table() -> None:
    settings = OrchestratorSettings(
        queue_backend="database",
        database_url="sqlite:///:memory:",
        queue_table="factory_queue",
    )

    queue = get_workflow_queue(settings)

    assert isinstance(queue, SqlQueue)
    assert queue.table_name == "factory_queue"


def test_redis_backend_requires_credentials() -> None:
    with pytest.raises(QueueConfigurationError):
        get_workflow_queue(OrchestratorSettings(queue_backend="redis", redis_url=None, redis_token=None))


def test_redis_backend_with_credentials() -> None:
    settings = OrchestratorSettings(
        queue_backend="redis",
        redis_url="https://example.upstash.io",
        redis_token="secret",
    )

    queue = get_workflow_queue(settings)

    try:
        assert isinstance(queue, RedisQueue)
    finally:
        queue.close()
