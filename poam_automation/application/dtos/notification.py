"""DTOs for notification rows written by workflow actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from poam_automation.domain.enums import NotificationPriority
from poam_automation.shared.enums import NotificationType


@dataclass(frozen=True)
class NotificationCreate:
    """Notification to persist for one recipient.

    scheduled_for in the future turns the row into a reminder that the
    notification surface shows once the time has passed.
    """

    organization_id: str
    recipient_id: str
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    entity_type: str | None = None
    entity_id: str | None = None
    scheduled_for: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationResult:
    """Persisted notification row."""

    id: str
    organization_id: str
    recipient_id: str
    type: str
    title: str
    message: str
    priority: str
    entity_type: str | None
    entity_id: str | None
    scheduled_for: datetime | None
    data: dict[str, Any]
