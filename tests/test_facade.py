from __future__ import annotations

from typing import List

from workflow_orchestrator import Completed, Suspended, WorkflowOrchestrator, handler, orchestrator
from workflow_orchestrator.core.config import OrchestratorSettings
from workflow_orchestrator.queues import InMemoryQueue


class SignupWorkflow:
    def __init__(self, welcome: str = "Welcome") -> None:
        self.welcome = welcome

    @orchestrator("user.signup")
    def plan(self, payload: dict) -> List[str]:
        return ["create-account", "send-welcome"]

    @handler("create-account")
    def create_account(self, payload: dict) -> dict:
        return {**payload, "account": f"acct-{payload['email']}"}

    @handler("send-welcome", is_async=True)
    def send_welcome(self, payload: dict) -> dict:
        return {**payload, "greeting": f"{self.welcome}, {payload['email']}"}


class Recorder:
    def __init__(self) -> None:
        self.steps: List[str] = []

    def on_step_started(self, step, message):
        self.steps.append(step)

    def on_step_completed(self, step, message, duration):
        pass

    def on_step_failed(self, step, message, error, duration):
        pass


def test_create_uses_configured_backend_and_retry_budget() -> None:
    facade = WorkflowOrchestrator.create(OrchestratorSettings(queue_backend="memory", max_async_retries=5))

    assert isinstance(facade.queue, InMemoryQueue)
    facade.register(SignupWorkflow)
    assert facade.registry.has_orchestrator("user.signup")


def test_register_chains_and_binds_instances(workflow_orchestrator: WorkflowOrchestrator) -> None:
    returned = workflow_orchestrator.register(SignupWorkflow("Hello"))
    assert returned is workflow_orchestrator

    suspended = workflow_orchestrator.execute("user.signup", {"email": "a@example.com"})
    result = workflow_orchestrator.process_async_step("send-welcome")

    assert isinstance(suspended, Suspended)
    assert result == Completed(
        payload={"email": "a@example.com", "account": "acct-a@example.com", "greeting": "Hello, a@example.com"}
    )


def test_with_methods_return_new_instances(workflow_orchestrator: WorkflowOrchestrator) -> None:
    workflow_orchestrator.register(SignupWorkflow)
    other_queue = InMemoryQueue()

    with_queue = workflow_orchestrator.with_queue(other_queue)
    with_middleware = workflow_orchestrator.with_middleware(lambda message, next_: next_(message))
    with_listener = workflow_orchestrator.with_event_listener(Recorder())

    assert len({id(workflow_orchestrator), id(with_queue), id(with_middleware), id(with_listener)}) == 4
    assert with_queue.queue is other_queue
    assert workflow_orchestrator.queue is not other_queue
    assert with_queue.registry is workflow_orchestrator.registry


def test_original_is_unaffected_by_derived_facades(workflow_orchestrator: WorkflowOrchestrator) -> None:
    recorder = Recorder()
    workflow_orchestrator.register(SignupWorkflow)
    workflow_orchestrator.with_event_listener(recorder)

    workflow_orchestrator.execute("user.signup", {"email": "b@example.com"})

    assert recorder.steps == []


def test_middleware_runs_in_order_and_survives_queue_swap(workflow_orchestrator: WorkflowOrchestrator) -> None:
    calls: List[str] = []

    def named(name):
        def middleware(message, next_):
            calls.append(name)
            return next_(message)

        return middleware

    other_queue = InMemoryQueue()
    derived = (
        workflow_orchestrator.register(SignupWorkflow)
        .with_middleware(named("first"))
        .with_middleware(named("second"))
        .with_queue(other_queue)
    )

    result = derived.execute("user.signup", {"email": "c@example.com"})

    assert calls == ["first", "second"]
    assert isinstance(result, Suspended)
    assert other_queue.size("send-welcome") == 1
    assert workflow_orchestrator.queue.size("send-welcome") == 0


def test_listener_sees_steps(workflow_orchestrator: WorkflowOrchestrator) -> None:
    recorder = Recorder()
    facade = workflow_orchestrator.register(SignupWorkflow).with_event_listener(recorder)

    facade.execute("user.signup", {"email": "d@example.com"})
    facade.process_async_step("send-welcome")

    assert recorder.steps == ["create-account", "send-welcome"]


def test_processing_unknown_queue_returns_none(workflow_orchestrator: WorkflowOrchestrator) -> None:
    assert workflow_orchestrator.process_async_step("nothing-here") is None


def test_package_exports_app_factory() -> None:
    import workflow_orchestrator

    assert callable(workflow_orchestrator.create_app)
    assert "create_app" in workflow_orchestrator.__all__
    assert not hasattr(workflow_orchestrator, "__getattr__")
