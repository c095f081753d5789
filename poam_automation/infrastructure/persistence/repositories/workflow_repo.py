"""WorkflowDefinition repository (read side used by the dispatcher and the worker)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.domain.entities.workflow import (
    ActionConfig,
    Condition,
    WorkflowDefinitionEntity,
)
from poam_automation.infrastructure.persistence.models.workflow import WorkflowDefinition
from poam_automation.infrastructure.persistence.repositories.base import BaseRepository


def _to_entity(row: WorkflowDefinition) -> WorkflowDefinitionEntity:
    """Map WorkflowDefinition ORM to the domain entity."""
    return WorkflowDefinitionEntity(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        description=row.description,
        trigger_type=row.trigger_type,
        trigger_conditions=[Condition.from_dict(c) for c in row.trigger_conditions or []],
        actions=[ActionConfig.from_dict(a) for a in row.actions or []],
        is_active=row.is_active,
        execution_order=row.execution_order,
    )


class WorkflowDefinitionRepository(BaseRepository[WorkflowDefinition]):
    """Workflow definition repository. Implements IWorkflowDefinitionRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, WorkflowDefinition)

    async def get_active_by_trigger(
        self, organization_id: str, trigger_type: str
    ) -> list[WorkflowDefinitionEntity]:
        async with self._transaction("load_workflow_definitions") as session:
            result = await session.execute(
                select(WorkflowDefinition)
                .where(
                    WorkflowDefinition.organization_id == organization_id,
                    WorkflowDefinition.trigger_type == trigger_type,
                    WorkflowDefinition.is_active.is_(True),
                )
                .order_by(
                    WorkflowDefinition.execution_order.asc(),
                    WorkflowDefinition.created_at.asc(),
                    WorkflowDefinition.id.asc(),
                )
            )
            return [_to_entity(row) for row in result.scalars().all()]

    async def get_by_id(
        self, organization_id: str, definition_id: str
    ) -> WorkflowDefinitionEntity | None:
        async with self._transaction("load_workflow_definition") as session:
            result = await session.execute(
                select(WorkflowDefinition).where(
                    WorkflowDefinition.id == definition_id,
                    WorkflowDefinition.organization_id == organization_id,
                )
            )
            row = result.scalar_one_or_none()
            return _to_entity(row) if row is not None else None
