"""WorkflowExecution repository. Written only through the ExecutionRecorder."""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.domain.entities.workflow import WorkflowExecutionEntity
from poam_automation.domain.exceptions import PersistenceError
from poam_automation.infrastructure.persistence.models.workflow import WorkflowExecution
from poam_automation.infrastructure.persistence.repositories.base import BaseRepository
from poam_automation.shared.enums import WorkflowExecutionStatus
from poam_automation.shared.utils.datetime import ensure_utc


def _to_entity(row: WorkflowExecution) -> WorkflowExecutionEntity:
    """Map WorkflowExecution ORM to the domain entity."""
    return WorkflowExecutionEntity(
        id=row.id,
        workflow_definition_id=row.workflow_definition_id,
        organization_id=row.organization_id,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        status=WorkflowExecutionStatus(row.status),
        started_at=ensure_utc(row.started_at),
        completed_at=ensure_utc(row.completed_at),
        execution_log=list(row.execution_log or []),
        error_message=row.error_message,
    )


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Workflow execution repository. Implements IWorkflowExecutionRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, WorkflowExecution)

    async def insert(self, execution: WorkflowExecutionEntity) -> None:
        async with self._transaction("insert_execution") as session:
            session.add(
                WorkflowExecution(
                    id=execution.id,
                    organization_id=execution.organization_id,
                    workflow_definition_id=execution.workflow_definition_id,
                    entity_type=execution.entity_type,
                    entity_id=execution.entity_id,
                    status=execution.status.value,
                    started_at=execution.started_at,
                    completed_at=execution.completed_at,
                    execution_log=list(execution.execution_log),
                    error_message=execution.error_message,
                )
            )

    async def save(self, execution: WorkflowExecutionEntity) -> None:
        """Write status, timestamps, log and error. Raises PersistenceError if the row is gone."""
        async with self._transaction("save_execution") as session:
            result = await session.execute(
                update(WorkflowExecution)
                .where(WorkflowExecution.id == execution.id)
                .values(
                    status=execution.status.value,
                    started_at=execution.started_at,
                    completed_at=execution.completed_at,
                    execution_log=list(execution.execution_log),
                    error_message=execution.error_message,
                )
            )
            if result.rowcount != 1:
                raise PersistenceError(
                    "save_execution",
                    f"execution {execution.id} not found",
                    {"execution_id": execution.id},
                )

    async def get_by_id(self, execution_id: str) -> WorkflowExecutionEntity | None:
        async with self._transaction("load_execution") as session:
            row = await self._get_row(session, execution_id)
            return _to_entity(row) if row is not None else None
