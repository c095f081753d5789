"""Tests for ActionChainExecutor: ordering, fail-fast, conditions and delays."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from poam_automation.shared.enums import WorkflowExecutionStatus
from tests.fakes import START, build_engine, make_definition


def _notify(recipient: str, **extra) -> dict:
    return {"type": "send_notification", "config": {"recipientIds": [recipient]}, **extra}


async def test_all_actions_succeed_in_order() -> None:
    engine = build_engine()
    engine.entities.add("poam_item", "item-1")
    definition = make_definition(
        [_notify("u1"), {"type": "update_status", "config": {"newStatus": "closed"}}]
    )

    execution = await engine.executor.run(definition, "poam_item", "item-1", {})

    assert execution.status is WorkflowExecutionStatus.COMPLETED
    assert [e["action_index"] for e in execution.execution_log] == [0, 1]
    assert all(e["status"] == "success" for e in execution.execution_log)
    assert execution.execution_log[1]["action_type"] == "update_status"
    assert engine.entities.entities[("poam_item", "item-1")].status == "closed"
    stored = engine.executions.rows[execution.id]
    assert stored.status is WorkflowExecutionStatus.COMPLETED
    assert stored.completed_at == START


async def test_failure_stops_chain_and_fails_execution() -> None:
    engine = build_engine()
    definition = make_definition(
        [
            _notify("u1"),
            {"type": "update_status", "config": {"newStatus": "closed"}},
            _notify("u2"),
        ]
    )

    execution = await engine.executor.run(definition, "poam_item", "missing", {})

    assert execution.status is WorkflowExecutionStatus.FAILED
    assert len(execution.execution_log) == 2
    failed = execution.execution_log[1]
    assert failed["status"] == "failed"
    assert failed["error"] == "poam_item not found: missing"
    assert execution.error_message == "poam_item not found: missing"
    assert [n.recipient_id for n in engine.notifications.created] == ["u1"]


async def test_false_action_condition_is_skipped_and_chain_continues() -> None:
    engine = build_engine()
    definition = make_definition(
        [
            _notify("u1", condition={"field": "severity", "operator": "greater_than", "value": 3}),
            _notify("u2"),
        ]
    )

    execution = await engine.executor.run(definition, "poam_item", "item-1", {"severity": 1})

    skipped, sent = execution.execution_log
    assert skipped["status"] == "skipped"
    assert skipped["reason"] == "Condition not met"
    assert sent["status"] == "success"
    assert execution.status is WorkflowExecutionStatus.COMPLETED


async def test_unknown_action_type_fails_run() -> None:
    engine = build_engine()
    definition = make_definition([{"type": "launch_rocket", "config": {}}, _notify("u1")])

    execution = await engine.executor.run(definition, "poam_item", "item-1", {})

    assert execution.status is WorkflowExecutionStatus.FAILED
    assert execution.error_message == "Unknown action type: launch_rocket"
    assert execution.execution_log[0]["action_type"] == "launch_rocket"
    assert engine.notifications.created == []


async def test_storage_error_inside_handler_fails_run() -> None:
    engine = build_engine()
    engine.notifications.fail = True

    execution = await engine.executor.run(
        make_definition([_notify("u1")]), "poam_item", "item-1", {}
    )

    assert execution.status is WorkflowExecutionStatus.FAILED
    assert "database unavailable" in execution.error_message


async def test_unexpected_handler_exception_fails_run(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = build_engine()
    monkeypatch.setattr(
        engine.resolver, "get_user_ids_for_roles", AsyncMock(side_effect=RuntimeError())
    )
    definition = make_definition(
        [
            {"type": "send_notification", "config": {"recipientRoles": ["isso"]}},
            _notify("u2"),
        ]
    )

    execution = await engine.executor.run(definition, "poam_item", "item-1", {})

    assert execution.status is WorkflowExecutionStatus.FAILED
    assert execution.error_message == "RuntimeError"
    assert [e["status"] for e in execution.execution_log] == ["failed"]
    stored = engine.executions.rows[execution.id]
    assert stored.status is WorkflowExecutionStatus.FAILED
    assert stored.completed_at == START
    assert engine.notifications.created == []


async def test_delay_suspends_without_blocking_and_resumes_later() -> None:
    engine = build_engine()
    engine.entities.add("poam_item", "item-1")
    definition = make_definition(
        [_notify("u1"), _notify("u2", delay=5), _notify("u3")]
    )
    engine.definitions.definitions.append(definition)

    execution = await engine.executor.run(definition, "poam_item", "item-1", {"k": "v"})

    assert execution.status is WorkflowExecutionStatus.RUNNING
    assert len(execution.execution_log) == 1
    [resumption] = engine.queue.scheduled.values()
    assert resumption.action_index == 1
    assert resumption.fire_at == START + timedelta(seconds=5)
    assert resumption.payload == {"k": "v"}

    assert (await engine.worker.run_due()).claimed == 0

    engine.clock.advance(5)
    result = await engine.worker.run_due()

    assert result.resumed == 1
    assert engine.queue.scheduled == {} and engine.queue.claimed == {}
    stored = engine.executions.rows[execution.id]
    assert stored.status is WorkflowExecutionStatus.COMPLETED
    first, second, third = (datetime.fromisoformat(e["timestamp"]) for e in stored.execution_log)
    assert (second - first).total_seconds() >= 5
    assert third == second
    assert [n.recipient_id for n in engine.notifications.created] == ["u1", "u2", "u3"]


async def test_each_delay_suspends_again() -> None:
    engine = build_engine()
    engine.entities.add("poam_item", "item-1")
    definition = make_definition([_notify("u1", delay=2), _notify("u2", delay=3)])
    engine.definitions.definitions.append(definition)

    execution = await engine.executor.run(definition, "poam_item", "item-1", {})
    assert execution.execution_log == []

    engine.clock.advance(2)
    await engine.worker.run_due()
    [second] = engine.queue.scheduled.values()
    assert second.action_index == 1
    assert second.fire_at == START + timedelta(seconds=5)

    engine.clock.advance(3)
    await engine.worker.run_due()
    assert engine.executions.rows[execution.id].status is WorkflowExecutionStatus.COMPLETED


async def test_resume_of_finished_execution_is_ignored() -> None:
    engine = build_engine()
    engine.entities.add("poam_item", "item-1")
    definition = make_definition([_notify("u1", delay=1)])
    engine.definitions.definitions.append(definition)
    execution = await engine.executor.run(definition, "poam_item", "item-1", {})
    [resumption] = engine.queue.scheduled.values()
    await engine.recorder.fail(engine.executions.rows[execution.id], "stopped by operator")

    result = await engine.executor.resume(definition, resumption)

    assert result.status is WorkflowExecutionStatus.FAILED
    assert engine.notifications.created == []
