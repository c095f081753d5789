"""Notification repository for send_notification, escalate and create_reminder."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.application.dtos.notification import (
    NotificationCreate,
    NotificationResult,
)
from poam_automation.infrastructure.persistence.models.notification import Notification
from poam_automation.infrastructure.persistence.repositories.base import BaseRepository
from poam_automation.shared.utils.datetime import ensure_utc
from poam_automation.shared.utils.generators import generate_cuid


def _to_result(n: Notification) -> NotificationResult:
    """Map Notification ORM to NotificationResult DTO."""
    return NotificationResult(
        id=n.id,
        organization_id=n.organization_id,
        recipient_id=n.recipient_id,
        type=n.type,
        title=n.title,
        message=n.message,
        priority=n.priority,
        entity_type=n.entity_type,
        entity_id=n.entity_id,
        scheduled_for=ensure_utc(n.scheduled_for),
        data=dict(n.data or {}),
    )


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository. Implements INotificationRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, Notification)

    async def create_many(
        self, notifications: list[NotificationCreate]
    ) -> list[NotificationResult]:
        """Insert all rows in one transaction; return them in input order."""
        if not notifications:
            return []
        rows = [
            Notification(
                id=generate_cuid(),
                organization_id=n.organization_id,
                recipient_id=n.recipient_id,
                type=n.type.value,
                title=n.title,
                message=n.message,
                priority=n.priority.value,
                entity_type=n.entity_type,
                entity_id=n.entity_id,
                scheduled_for=n.scheduled_for,
                data=dict(n.data) or None,
            )
            for n in notifications
        ]
        async with self._transaction("create_notifications") as session:
            session.add_all(rows)
            await session.flush()
            return [_to_result(row) for row in rows]
