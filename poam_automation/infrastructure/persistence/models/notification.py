"""Notification ORM model. In-app notifications and reminders written by workflow actions."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from poam_automation.infrastructure.persistence.database import Base
from poam_automation.infrastructure.persistence.models.mixins import MultiTenantModel
from poam_automation.infrastructure.persistence.models.workflow import status_check
from poam_automation.shared.enums import NotificationType


class Notification(MultiTenantModel, Base):
    """Notification for one recipient. Table: notification."""

    __tablename__ = "notification"

    recipient_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    scheduled_for: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_org_recipient", "organization_id", "recipient_id"),
        status_check("type", NotificationType.values(), "notification_type_check"),
    )
