"""Domain enumerations for workflow automation.

Closed sets of trigger types, action types, condition operators,
compliance entity types and notification priorities.
"""

from enum import Enum


class TriggerType(str, Enum):
    """Category of domain event a workflow definition listens for."""

    STATUS_CHANGE = "status_change"
    DATE_BASED = "date_based"
    MANUAL = "manual"
    APPROVAL_REQUIRED = "approval_required"
    OVERDUE = "overdue"
    MILESTONE_COMPLETION = "milestone_completion"
    EVIDENCE_UPLOADED = "evidence_uploaded"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid trigger type values as strings."""
        return [member.value for member in cls]


class ActionType(str, Enum):
    """Side effect a workflow action performs.

    Every member must have a handler in ActionHandlerRegistry; the
    registry refuses to build otherwise.
    """

    SEND_NOTIFICATION = "send_notification"
    SEND_EMAIL = "send_email"
    CREATE_TASK = "create_task"
    UPDATE_STATUS = "update_status"
    ASSIGN_USER = "assign_user"
    ESCALATE = "escalate"
    CREATE_REMINDER = "create_reminder"
    WEBHOOK = "webhook"
    SLACK_NOTIFICATION = "slack_notification"
    TEAMS_NOTIFICATION = "teams_notification"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid action type values as strings."""
        return [member.value for member in cls]


class ConditionOperator(str, Enum):
    """Comparison applied by a single condition."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    IN = "in"
    NOT_IN = "not_in"


class EntityType(str, Enum):
    """Compliance entities that trigger workflows or are targeted by actions."""

    POAM_ITEM = "poam_item"
    MILESTONE = "milestone"
    TASK = "task"
    EVIDENCE = "evidence"

    @classmethod
    def mutable(cls) -> frozenset["EntityType"]:
        """Entity types whose status and assignee can be changed by actions."""
        return frozenset({cls.POAM_ITEM, cls.MILESTONE, cls.TASK})


class NotificationPriority(str, Enum):
    """Priority carried by notification rows."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
