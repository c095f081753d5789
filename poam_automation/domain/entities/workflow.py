"""Workflow domain entities.

A workflow definition is a trigger (type + conditions) and an ordered
list of actions. An execution is one run of that list for one trigger
event, tracked from pending to a terminal status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from poam_automation.domain.enums import ActionType
from poam_automation.domain.exceptions import (
    InvalidExecutionTransition,
    UnknownActionTypeError,
)
from poam_automation.shared.enums import WorkflowExecutionStatus

_ALLOWED_TRANSITIONS: dict[WorkflowExecutionStatus, frozenset[WorkflowExecutionStatus]] = {
    WorkflowExecutionStatus.PENDING: frozenset({WorkflowExecutionStatus.RUNNING}),
    WorkflowExecutionStatus.RUNNING: frozenset(
        {WorkflowExecutionStatus.COMPLETED, WorkflowExecutionStatus.FAILED}
    ),
    WorkflowExecutionStatus.COMPLETED: frozenset(),
    WorkflowExecutionStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class Condition:
    """Single comparison over a dot-path field of the trigger payload.

    operator is kept as the stored string; unknown operators evaluate to
    false instead of failing the load.
    """

    field: str
    operator: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            field=str(data.get("field", "")),
            operator=str(data.get("operator", "")),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass(frozen=True)
class ActionConfig:
    """One configured side effect in a workflow's ordered action list."""

    type: str
    config: dict[str, Any] = field(default_factory=dict)
    delay: float | None = None
    condition: Condition | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionConfig:
        raw_condition = data.get("condition")
        raw_delay = data.get("delay")
        return cls(
            type=str(data.get("type", "")),
            config=dict(data.get("config") or {}),
            delay=float(raw_delay) if raw_delay is not None else None,
            condition=Condition.from_dict(raw_condition) if raw_condition else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "config": dict(self.config)}
        if self.delay is not None:
            data["delay"] = self.delay
        if self.condition is not None:
            data["condition"] = self.condition.to_dict()
        return data

    @property
    def action_type(self) -> ActionType:
        """Return the typed action type. Raises UnknownActionTypeError."""
        try:
            return ActionType(self.type)
        except ValueError:
            raise UnknownActionTypeError(self.type) from None

    @property
    def has_delay(self) -> bool:
        return self.delay is not None and self.delay > 0


@dataclass
class WorkflowDefinitionEntity:
    """Domain entity for a workflow definition (trigger + actions). Read-only to the engine."""

    id: str
    organization_id: str
    name: str
    trigger_type: str
    trigger_conditions: list[Condition] = field(default_factory=list)
    actions: list[ActionConfig] = field(default_factory=list)
    is_active: bool = True
    description: str | None = None
    execution_order: int = 0

    def belongs_to_organization(self, organization_id: str) -> bool:
        """Return whether this definition belongs to the given organization."""
        return self.organization_id == organization_id

    def can_trigger_on(self, trigger_type: str) -> bool:
        """Return whether this definition is active and listens for trigger_type."""
        return self.is_active and self.trigger_type == trigger_type


@dataclass
class WorkflowExecutionEntity:
    """One chain run of a workflow definition for one triggering event.

    Status moves pending -> running -> completed|failed exactly once;
    terminal executions reject further transitions and log entries.
    """

    id: str
    workflow_definition_id: str
    organization_id: str
    entity_type: str
    entity_id: str
    status: WorkflowExecutionStatus = WorkflowExecutionStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    execution_log: list[dict[str, Any]] = field(default_factory=list)
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _move_to(self, target: WorkflowExecutionStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidExecutionTransition(self.id, self.status.value, target.value)
        self.status = target

    def mark_running(self, now: datetime) -> None:
        self._move_to(WorkflowExecutionStatus.RUNNING)
        self.started_at = now

    def mark_completed(self, now: datetime) -> None:
        self._move_to(WorkflowExecutionStatus.COMPLETED)
        self.completed_at = now

    def mark_failed(self, now: datetime, error_message: str) -> None:
        self._move_to(WorkflowExecutionStatus.FAILED)
        self.completed_at = now
        self.error_message = error_message

    def append_entry(self, entry: dict[str, Any]) -> None:
        if self.is_terminal:
            raise InvalidExecutionTransition(self.id, self.status.value, "append_log_entry")
        self.execution_log.append(entry)
