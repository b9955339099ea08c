from __future__ import annotations

from typing import List

from workflow_orchestrator.workflow_engine.message import WorkflowMessage
from workflow_orchestrator.workflow_engine.middleware import run_chain


def _tagging(name: str, seen: List[str]):
    def middleware(message, next_):
        seen.append(name)
        tags = message.get_header("tags", ())
        return next_(message.with_header("tags", (*tags, name)))

    return middleware


def test_empty_chain_returns_message_unchanged() -> None:
    message = WorkflowMessage("payload", ["a"])
    assert run_chain([], 0, message) is message


def test_runs_in_registration_order() -> None:
    seen: List[str] = []
    chain = [_tagging("A", seen), _tagging("B", seen), _tagging("C", seen)]

    result = run_chain(chain, 0, WorkflowMessage("payload"))

    assert seen == ["A", "B", "C"]
    assert result.get_header("tags") == ("A", "B", "C")


def test_post_processing_sees_downstream_result() -> None:
    def outer(message, next_):
        result = next_(message)
        return result.with_header("outer_saw", result.get_header("inner"))

    def inner(message, next_):
        return next_(message.with_header("inner", "ran"))

    result = run_chain([outer, inner], 0, WorkflowMessage("payload"))

    assert result.get_header("outer_saw") == "ran"


def test_short_circuit_skips_remaining_middleware() -> None:
    seen: List[str] = []

    def halt(message, next_):
        seen.append("halt")
        return message.with_payload("halted")

    result = run_chain([halt, _tagging("never", seen)], 0, WorkflowMessage("payload"))

    assert seen == ["halt"]
    assert result.payload == "halted"
