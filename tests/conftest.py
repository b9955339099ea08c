import json
import os
import sys
import warnings
from collections import defaultdict, deque
from fnmatch import fnmatchcase
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("WFO_ENVIRONMENT", "test")
os.environ.setdefault("WFO_QUEUE_BACKEND", "memory")
os.environ.setdefault("WFO_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("WFO_REDIS_URL", "")
os.environ.setdefault("WFO_REDIS_TOKEN", "")
os.environ.setdefault("WFO_LOG_JSON", "false")
os.environ.setdefault("WFO_LOG_PROPAGATE", "true")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from workflow_orchestrator.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from workflow_orchestrator.core.database import create_database_engine  # noqa: E402
from workflow_orchestrator.facade import WorkflowOrchestrator  # noqa: E402
from workflow_orchestrator.main import create_app  # noqa: E402
from workflow_orchestrator.queues import InMemoryQueue, RedisQueue, SqlQueue  # noqa: E402
from workflow_orchestrator.workflow_engine import SimpleContainer  # noqa: E402


@pytest.fixture()
def container() -> SimpleContainer:
    return SimpleContainer()


@pytest.fixture()
def memory_queue() -> InMemoryQueue:
    return InMemoryQueue()


@pytest.fixture()
def sql_engine():
    engine = create_database_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture()
def sql_queue(sql_engine) -> SqlQueue:
    return SqlQueue(sql_engine, poll_interval=0.01)


@pytest.fixture()
def workflow_orchestrator(container, memory_queue) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(container=container, queue=memory_queue)


@pytest.fixture()
def client(workflow_orchestrator) -> TestClient:  # noqa: ANN001
    app = create_app(workflow_orchestrator)
    with TestClient(app) as test_client:
        yield test_client


class FakeUpstash:
    """In-process stand-in for the Upstash REST endpoint, list commands only."""

    def __init__(self) -> None:
        self.lists = defaultdict(deque)
        self.commands = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer test-token"
        command, *args = json.loads(request.content)
        self.commands.append([command, *args])
        handler = getattr(self, f"_{command.lower()}")
        return httpx.Response(200, json={"result": handler(*args)})

    def _rpush(self, key, *values):
        self.lists[key].extend(values)
        return len(self.lists[key])

    def _lpop(self, key):
        items = self.lists.get(key)
        if not items:
            return None
        value = items.popleft()
        if not items:
            del self.lists[key]
        return value

    def _blpop(self, key, timeout):
        value = self._lpop(key)
        return None if value is None else [key, value]

    def _llen(self, key):
        return len(self.lists.get(key, ()))

    def _lindex(self, key, index):
        items = self.lists.get(key)
        if not items:
            return None
        return items[int(index)]

    def _del(self, key):
        return 1 if self.lists.pop(key, None) is not None else 0

    def _keys(self, pattern):
        return [key for key in self.lists if fnmatchcase(key, pattern)]


@pytest.fixture()
def fake_upstash() -> FakeUpstash:
    return FakeUpstash()


@pytest.fixture()
def redis_queue(fake_upstash: FakeUpstash):
    client = httpx.Client(
        base_url="http://redis.test",
        headers={"Authorization": "Bearer test-token"},
        transport=httpx.MockTransport(fake_upstash.handle),
    )
    queue = RedisQueue(url="http://redis.test", token="test-token", client=client)
    yield queue
    queue.close()


@pytest.fixture(params=["memory", "sql", "redis"])
def any_queue(request):
    return request.getfixturevalue(f"{request.param}_queue")


warnings.filterwarnings("ignore", category=PendingDeprecationWarning, module="starlette.formparsers")
