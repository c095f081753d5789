"""DTOs for workflow-created tasks and their parent milestones (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskCreate:
    """Follow-up task requested by the create_task action."""

    organization_id: str
    milestone_id: str
    name: str
    description: str | None = None
    assignee_id: str | None = None
    planned_end_date: datetime | None = None
    priority: str = "medium"


@dataclass(frozen=True)
class TaskResult:
    """Task created by workflow create_task action."""

    id: str
    organization_id: str
    milestone_id: str
    name: str
    description: str | None
    assignee_id: str | None
    planned_end_date: datetime | None
    status: str
    priority: str
