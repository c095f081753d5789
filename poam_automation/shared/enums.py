"""Shared enumerations for the POA&M automation engine.

Cross-cutting enums used by application and infrastructure (execution
lifecycle, log entry status, notification kinds). Domain-specific enums
(trigger and action types) live in poam_automation.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow execution lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowExecutionStatus.COMPLETED, WorkflowExecutionStatus.FAILED)


class ActionOutcomeStatus(_ValuesMixin, str, Enum):
    """Status of one entry in an execution log."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class ResumptionStatus(_ValuesMixin, str, Enum):
    """Lifecycle of a delayed chain remainder waiting in the resumption queue."""

    SCHEDULED = "scheduled"
    CLAIMED = "claimed"


class NotificationType(_ValuesMixin, str, Enum):
    """Kind of notification row written by workflow actions."""

    WORKFLOW_ACTION = "workflow_action"
    ESCALATION = "escalation"
    REMINDER = "reminder"
