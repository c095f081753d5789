"""Compliance entity ORM models touched by workflow actions.

Only the columns workflow actions read or write are mapped; the rest of
these tables belongs to the surrounding application.
"""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from poam_automation.infrastructure.persistence.database import Base
from poam_automation.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TimestampMixin,
)


class AppUser(CuidMixin, TimestampMixin, Base):
    """Application user (email lookup for send_email). Table: app_user."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )


class OrganizationMembership(MultiTenantModel, Base):
    """User membership and role within an organization. Table: organization_membership."""

    __tablename__ = "organization_membership"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_membership_user"),
        Index("ix_organization_membership_org_role", "organization_id", "role"),
    )


class PoamItem(MultiTenantModel, Base):
    """POA&M item (weakness under remediation). Table: poam_item."""

    __tablename__ = "poam_item"

    weakness: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="open", server_default="open"
    )
    assigned_to_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    planned_completion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Milestone(MultiTenantModel, Base):
    """Milestone of a POA&M item. Table: milestone."""

    __tablename__ = "milestone"

    poam_item_id: Mapped[str] = mapped_column(
        String, ForeignKey("poam_item.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="not_started", server_default="not_started"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    assignee_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    target_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_milestone_org_item_name", "organization_id", "poam_item_id", "name"),
    )


class Task(MultiTenantModel, Base):
    """Task under a milestone (also created by the create_task action). Table: task."""

    __tablename__ = "task"

    milestone_id: Mapped[str] = mapped_column(
        String, ForeignKey("milestone.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="not_started", server_default="not_started"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    assignee_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    planned_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Evidence(MultiTenantModel, Base):
    """Evidence uploaded against a POA&M item. Table: evidence."""

    __tablename__ = "evidence"

    poam_item_id: Mapped[str] = mapped_column(
        String, ForeignKey("poam_item.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    uploaded_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
