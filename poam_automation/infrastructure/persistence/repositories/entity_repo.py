"""Compliance entity repository: the storage port of entity-mutating actions."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.application.dtos.task import TaskCreate, TaskResult
from poam_automation.domain.enums import EntityType
from poam_automation.infrastructure.persistence.database import Base
from poam_automation.infrastructure.persistence.models.compliance import (
    Evidence,
    Milestone,
    PoamItem,
    Task,
)
from poam_automation.infrastructure.persistence.repositories.base import BaseRepository
from poam_automation.shared.utils.datetime import ensure_utc
from poam_automation.shared.utils.generators import generate_cuid

WORKFLOW_MILESTONE_NAME = "Workflow Tasks"
WORKFLOW_MILESTONE_DESCRIPTION = "Tasks created by automated workflows"

_MODELS: dict[EntityType, type[Base]] = {
    EntityType.POAM_ITEM: PoamItem,
    EntityType.MILESTONE: Milestone,
    EntityType.TASK: Task,
    EntityType.EVIDENCE: Evidence,
}

# Column holding the responsible user; evidence has its uploader.
_ASSIGNEE_COLUMNS: dict[EntityType, str] = {
    EntityType.POAM_ITEM: "assigned_to_id",
    EntityType.MILESTONE: "assignee_id",
    EntityType.TASK: "assignee_id",
    EntityType.EVIDENCE: "uploaded_by_id",
}


def _parse(entity_type: str) -> EntityType | None:
    try:
        return EntityType(entity_type)
    except ValueError:
        return None


def _to_task_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        organization_id=t.organization_id,
        milestone_id=t.milestone_id,
        name=t.name,
        description=t.description,
        assignee_id=t.assignee_id,
        planned_end_date=ensure_utc(t.planned_end_date),
        status=t.status,
        priority=t.priority,
    )


class EntityRepository(BaseRepository[Task]):
    """Compliance entity repository. Implements IEntityRepository.

    Unknown entity types behave like missing rows (False / None); the
    action handlers decide which types they accept.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, Task)

    async def exists(self, entity_type: str, entity_id: str) -> bool:
        parsed = _parse(entity_type)
        if parsed is None:
            return False
        model: Any = _MODELS[parsed]
        async with self._transaction("entity_exists") as session:
            result = await session.execute(select(model.id).where(model.id == entity_id))
            return result.scalar_one_or_none() is not None

    async def _update_column(
        self, operation: str, entity_type: str, entity_id: str, values: dict[str, Any]
    ) -> bool:
        parsed = _parse(entity_type)
        if parsed is None or parsed not in EntityType.mutable():
            return False
        model: Any = _MODELS[parsed]
        async with self._transaction(operation) as session:
            result = await session.execute(
                update(model).where(model.id == entity_id).values(**values)
            )
            return result.rowcount == 1

    async def update_status(self, entity_type: str, entity_id: str, status: str) -> bool:
        return await self._update_column(
            "update_entity_status", entity_type, entity_id, {"status": status}
        )

    async def assign(self, entity_type: str, entity_id: str, user_id: str) -> bool:
        parsed = _parse(entity_type)
        if parsed is None:
            return False
        return await self._update_column(
            "assign_entity", entity_type, entity_id, {_ASSIGNEE_COLUMNS[parsed]: user_id}
        )

    async def get_assignee_id(self, entity_type: str, entity_id: str) -> str | None:
        parsed = _parse(entity_type)
        if parsed is None:
            return None
        model: Any = _MODELS[parsed]
        column = getattr(model, _ASSIGNEE_COLUMNS[parsed])
        async with self._transaction("load_entity_assignee") as session:
            result = await session.execute(select(column).where(model.id == entity_id))
            return result.scalar_one_or_none()

    async def get_or_create_workflow_milestone(
        self, organization_id: str, poam_item_id: str
    ) -> str:
        """Return the item's "Workflow Tasks" milestone id, creating it on first use."""
        async with self._transaction("get_or_create_workflow_milestone") as session:
            result = await session.execute(
                select(Milestone.id)
                .where(
                    Milestone.organization_id == organization_id,
                    Milestone.poam_item_id == poam_item_id,
                    Milestone.name == WORKFLOW_MILESTONE_NAME,
                )
                .order_by(Milestone.created_at.asc(), Milestone.id.asc())
                .limit(1)
            )
            existing = result.scalar_one_or_none()
            if existing is not None:
                return existing
            milestone = Milestone(
                id=generate_cuid(),
                organization_id=organization_id,
                poam_item_id=poam_item_id,
                name=WORKFLOW_MILESTONE_NAME,
                description=WORKFLOW_MILESTONE_DESCRIPTION,
                status="in_progress",
                priority="medium",
            )
            session.add(milestone)
            return milestone.id

    async def get_task_milestone_id(self, task_id: str) -> str | None:
        async with self._transaction("load_task_milestone") as session:
            result = await session.execute(select(Task.milestone_id).where(Task.id == task_id))
            return result.scalar_one_or_none()

    async def create_task(self, data: TaskCreate) -> TaskResult:
        """Create a task and return the result DTO."""
        task = Task(
            id=generate_cuid(),
            organization_id=data.organization_id,
            milestone_id=data.milestone_id,
            name=data.name,
            description=data.description,
            assignee_id=data.assignee_id,
            planned_end_date=data.planned_end_date,
            status="not_started",
            priority=data.priority,
        )
        async with self._transaction("create_task") as session:
            session.add(task)
            await session.flush()
            return _to_task_result(task)
