from __future__ import annotations

import pytest

from workflow_orchestrator.workflow_engine.errors import MessageDecodeError
from workflow_orchestrator.workflow_engine.message import WorkflowMessage


def test_message_defaults() -> None:
    message = WorkflowMessage("payload")

    assert message.payload == "payload"
    assert message.steps == ()
    assert message.all_headers() == {}
    assert message.id.startswith("wf_")
    assert message.next_step is None
    assert not message.has_more_steps()


def test_message_keeps_explicit_id() -> None:
    message = WorkflowMessage("payload", id="wf_custom")
    assert message.id == "wf_custom"


def test_without_first_step_advances_the_step_list() -> None:
    message = WorkflowMessage("payload", ["validate", "payment", "confirmation"])

    advanced = message.without_first_step()

    assert message.steps == ("validate", "payment", "confirmation")
    assert advanced.steps == ("payment", "confirmation")
    assert advanced.next_step == "payment"


def test_steps_allow_repeats() -> None:
    message = WorkflowMessage("payload", ["retry", "retry"])
    assert message.without_first_step().next_step == "retry"


def test_with_header_leaves_original_untouched() -> None:
    original = WorkflowMessage("payload", headers={"tier": "basic"})

    updated = original.with_header("tier", "premium")

    assert original.get_header("tier") == "basic"
    assert updated.get_header("tier") == "premium"
    assert updated.id == original.id


def test_with_headers_merges_and_overrides() -> None:
    original = WorkflowMessage("payload", headers={"a": 1, "b": 2})

    merged = original.with_headers({"b": 3, "c": 4})

    assert merged.all_headers() == {"a": 1, "b": 3, "c": 4}
    assert original.all_headers() == {"a": 1, "b": 2}


def test_get_header_default() -> None:
    message = WorkflowMessage("payload")
    assert message.get_header("missing") is None
    assert message.get_header("missing", "fallback") == "fallback"


def test_headers_are_read_only() -> None:
    message = WorkflowMessage("payload", headers={"a": 1})
    with pytest.raises(TypeError):
        message.headers["a"] = 2  # type: ignore[index]


def test_caller_mapping_changes_do_not_leak_into_message() -> None:
    headers = {"a": 1}
    message = WorkflowMessage("payload", headers=headers)
    headers["a"] = 2
    assert message.get_header("a") == 1


def test_with_payload_and_with_steps_preserve_other_fields() -> None:
    original = WorkflowMessage({"total": 100}, ["validate"], {"tier": "premium"})

    with_payload = original.with_payload({"total": 90})
    with_steps = original.with_steps(["payment", "confirmation"])

    assert with_payload.payload == {"total": 90}
    assert with_payload.steps == original.steps
    assert with_payload.all_headers() == original.all_headers()
    assert with_steps.steps == ("payment", "confirmation")
    assert with_steps.payload == original.payload
    assert original.payload == {"total": 100}


def test_id_is_stable_across_transformations() -> None:
    original = WorkflowMessage("payload", ["a", "b"])

    derived = (
        original.with_payload("other")
        .with_header("k", "v")
        .with_headers({"x": 1})
        .without_first_step()
        .with_steps(["c"])
    )

    assert derived.id == original.id


def test_ids_are_unique() -> None:
    ids = {WorkflowMessage(None).id for _ in range(500)}
    assert len(ids) == 500


def test_dict_round_trip() -> None:
    original = WorkflowMessage({"order": {"id": "ORD-1"}}, ["payment"], {"tier": "premium"})

    restored = WorkflowMessage.from_dict(original.to_dict())

    assert restored == original


def test_from_dict_requires_payload() -> None:
    with pytest.raises(MessageDecodeError):
        WorkflowMessage.from_dict({"id": "wf_1", "steps": [], "headers": {}})


def test_from_dict_accepts_explicit_null_payload() -> None:
    restored = WorkflowMessage.from_dict({"id": "wf_1", "payload": None})
    assert restored.payload is None
    assert restored.id == "wf_1"
