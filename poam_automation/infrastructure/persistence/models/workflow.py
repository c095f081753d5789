"""WorkflowDefinition, WorkflowExecution and WorkflowResumption ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from poam_automation.infrastructure.persistence.database import Base
from poam_automation.infrastructure.persistence.models.mixins import MultiTenantModel
from poam_automation.shared.enums import ResumptionStatus, WorkflowExecutionStatus


def status_check(column: str, values: list[str], name: str) -> CheckConstraint:
    """CHECK constraint restricting column to the given literal values."""
    quoted = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return CheckConstraint(f"{column} IN ({quoted})", name=name)


class WorkflowDefinition(MultiTenantModel, Base):
    """Workflow definition. Table: workflow_definition. Trigger + conditions + actions JSON."""

    __tablename__ = "workflow_definition"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.true()
    )
    trigger_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    trigger_conditions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    execution_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )

    __table_args__ = (
        Index(
            "ix_workflow_definition_org_trigger_active",
            "organization_id",
            "trigger_type",
            "is_active",
        ),
    )


class WorkflowExecution(MultiTenantModel, Base):
    """Workflow execution audit. Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    workflow_definition_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow_definition.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=WorkflowExecutionStatus.PENDING.value,
        index=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    execution_log: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "ix_workflow_execution_org_workflow",
            "organization_id",
            "workflow_definition_id",
        ),
        Index("ix_workflow_execution_entity", "entity_type", "entity_id"),
        status_check(
            "status",
            WorkflowExecutionStatus.values(),
            "workflow_execution_status_check",
        ),
    )


class WorkflowResumption(MultiTenantModel, Base):
    """Suspended chain remainder waiting for its delay. Table: workflow_resumption."""

    __tablename__ = "workflow_resumption"

    execution_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow_execution.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workflow_definition_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    action_index: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    fire_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ResumptionStatus.SCHEDULED.value
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_workflow_resumption_status_fire_at", "status", "fire_at"),
        status_check("status", ResumptionStatus.values(), "workflow_resumption_status_check"),
    )
