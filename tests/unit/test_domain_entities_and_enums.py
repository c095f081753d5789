"""Tests for workflow domain entities and enums."""

import pytest

from poam_automation.domain.entities.workflow import (
    ActionConfig,
    Condition,
    WorkflowExecutionEntity,
)
from poam_automation.domain.enums import ActionType, EntityType, TriggerType
from poam_automation.domain.exceptions import (
    InvalidExecutionTransition,
    UnknownActionTypeError,
)
from poam_automation.shared.enums import WorkflowExecutionStatus
from tests.fakes import START, make_definition


class TestEnums:
    """Closed value sets and .values() helpers."""

    def test_trigger_types(self) -> None:
        got = TriggerType.values()
        assert "status_change" in got
        assert "evidence_uploaded" in got
        assert len(got) == 7

    def test_action_types(self) -> None:
        assert len(ActionType.values()) == 10
        assert ActionType("teams_notification") is ActionType.TEAMS_NOTIFICATION

    def test_evidence_is_not_mutable(self) -> None:
        assert EntityType.EVIDENCE not in EntityType.mutable()
        assert EntityType.TASK in EntityType.mutable()

    def test_terminal_statuses(self) -> None:
        assert WorkflowExecutionStatus.COMPLETED.is_terminal
        assert WorkflowExecutionStatus.FAILED.is_terminal
        assert not WorkflowExecutionStatus.RUNNING.is_terminal


class TestWorkflowExecutionEntity:
    """Execution status moves pending -> running -> completed|failed once."""

    def _execution(self) -> WorkflowExecutionEntity:
        return WorkflowExecutionEntity(
            id="ex-1",
            workflow_definition_id="wf-1",
            organization_id="org-1",
            entity_type="poam_item",
            entity_id="item-1",
        )

    def test_cannot_complete_before_running(self) -> None:
        execution = self._execution()
        with pytest.raises(InvalidExecutionTransition) as exc_info:
            execution.mark_completed(START)
        assert exc_info.value.details["current"] == "pending"

    def test_failed_is_terminal(self) -> None:
        execution = self._execution()
        execution.mark_running(START)
        execution.mark_failed(START, "boom")

        assert execution.is_terminal
        assert execution.error_message == "boom"
        assert execution.completed_at == START
        with pytest.raises(InvalidExecutionTransition):
            execution.mark_completed(START)
        with pytest.raises(InvalidExecutionTransition):
            execution.append_entry({"status": "success"})


class TestActionConfig:
    def test_parses_delay_and_condition(self) -> None:
        action = ActionConfig.from_dict(
            {
                "type": "escalate",
                "delay": "30",
                "condition": {"field": "a", "operator": "equals", "value": 1},
            }
        )
        assert action.delay == 30.0
        assert action.has_delay
        assert action.condition == Condition("a", "equals", 1)

    def test_zero_delay_is_no_delay(self) -> None:
        assert ActionConfig.from_dict({"type": "escalate", "delay": 0}).has_delay is False
        assert ActionConfig.from_dict({"type": "escalate"}).has_delay is False

    def test_unknown_type_fails_only_when_resolved(self) -> None:
        action = ActionConfig.from_dict({"type": "launch_rocket"})
        with pytest.raises(UnknownActionTypeError):
            _ = action.action_type

    def test_round_trips_stored_shape(self) -> None:
        raw = {"type": "webhook", "config": {"webhookUrl": "https://x"}, "delay": 5.0}
        assert ActionConfig.from_dict(raw).to_dict() == raw


class TestWorkflowDefinitionEntity:
    def test_trigger_matching(self) -> None:
        definition = make_definition([], trigger_type="overdue")
        assert definition.can_trigger_on("overdue")
        assert not definition.can_trigger_on("status_change")
        assert definition.belongs_to_organization("org-1")
        assert not definition.belongs_to_organization("org-2")

    def test_inactive_never_triggers(self) -> None:
        assert not make_definition([], is_active=False).can_trigger_on("status_change")
