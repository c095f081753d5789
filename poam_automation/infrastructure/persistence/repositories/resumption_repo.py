"""SQL resumption queue (workflow_resumption table). Default delayed-action backend."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.application.dtos.workflow import WorkflowResumption as ResumptionDTO
from poam_automation.infrastructure.persistence.models.workflow import WorkflowResumption
from poam_automation.infrastructure.persistence.repositories.base import BaseRepository
from poam_automation.shared.enums import ResumptionStatus
from poam_automation.shared.utils.datetime import ensure_utc

_SCHEDULED = ResumptionStatus.SCHEDULED.value
_CLAIMED = ResumptionStatus.CLAIMED.value


def _to_dto(row: WorkflowResumption) -> ResumptionDTO:
    """Map WorkflowResumption ORM to the application DTO."""
    fire_at = ensure_utc(row.fire_at)
    assert fire_at is not None
    return ResumptionDTO(
        id=row.id,
        execution_id=row.execution_id,
        workflow_definition_id=row.workflow_definition_id,
        organization_id=row.organization_id,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        action_index=row.action_index,
        payload=dict(row.payload or {}),
        fire_at=fire_at,
    )


class SqlResumptionQueue(BaseRepository[WorkflowResumption]):
    """Resumption queue backed by the workflow_resumption table. Implements IResumptionQueue.

    A row is claimed by a conditional UPDATE (status scheduled -> claimed);
    only the worker whose UPDATE matched processes it. claimed_at marks the
    start of the claim; reclaim_stale puts expired claims back to scheduled.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory, WorkflowResumption)

    async def schedule(self, resumption: ResumptionDTO) -> None:
        async with self._transaction("schedule_resumption") as session:
            session.add(
                WorkflowResumption(
                    id=resumption.id,
                    organization_id=resumption.organization_id,
                    execution_id=resumption.execution_id,
                    workflow_definition_id=resumption.workflow_definition_id,
                    entity_type=resumption.entity_type,
                    entity_id=resumption.entity_id,
                    action_index=resumption.action_index,
                    payload=resumption.payload,
                    fire_at=ensure_utc(resumption.fire_at),
                    status=_SCHEDULED,
                )
            )

    async def claim_due(self, now: datetime, limit: int) -> list[ResumptionDTO]:
        now = ensure_utc(now)
        async with self._transaction("claim_resumptions") as session:
            result = await session.execute(
                select(WorkflowResumption)
                .where(
                    WorkflowResumption.status == _SCHEDULED,
                    WorkflowResumption.fire_at <= now,
                )
                .order_by(WorkflowResumption.fire_at.asc(), WorkflowResumption.id.asc())
                .limit(limit)
            )
            candidates = list(result.scalars().all())
            claimed: list[ResumptionDTO] = []
            for row in candidates:
                outcome = await session.execute(
                    update(WorkflowResumption)
                    .where(
                        WorkflowResumption.id == row.id,
                        WorkflowResumption.status == _SCHEDULED,
                    )
                    .values(status=_CLAIMED, claimed_at=now)
                    .execution_options(synchronize_session=False)
                )
                if outcome.rowcount == 1:
                    claimed.append(_to_dto(row))
            return claimed

    async def release(self, resumption_id: str) -> None:
        async with self._transaction("release_resumption") as session:
            await session.execute(
                delete(WorkflowResumption).where(WorkflowResumption.id == resumption_id)
            )

    async def reclaim_stale(self, claimed_before: datetime) -> list[ResumptionDTO]:
        claimed_before = ensure_utc(claimed_before)
        async with self._transaction("reclaim_resumptions") as session:
            result = await session.execute(
                select(WorkflowResumption)
                .where(
                    WorkflowResumption.status == _CLAIMED,
                    WorkflowResumption.claimed_at < claimed_before,
                )
                .order_by(WorkflowResumption.fire_at.asc(), WorkflowResumption.id.asc())
            )
            reclaimed: list[ResumptionDTO] = []
            for row in result.scalars().all():
                outcome = await session.execute(
                    update(WorkflowResumption)
                    .where(
                        WorkflowResumption.id == row.id,
                        WorkflowResumption.status == _CLAIMED,
                        WorkflowResumption.claimed_at == row.claimed_at,
                    )
                    .values(status=_SCHEDULED, claimed_at=None)
                    .execution_options(synchronize_session=False)
                )
                if outcome.rowcount == 1:
                    reclaimed.append(_to_dto(row))
            return reclaimed

    async def _cancel_where(self, operation: str, *criteria: Any) -> list[ResumptionDTO]:
        async with self._transaction(operation) as session:
            result = await session.execute(
                select(WorkflowResumption).where(
                    WorkflowResumption.status == _SCHEDULED, *criteria
                )
            )
            removed: list[ResumptionDTO] = []
            for row in result.scalars().all():
                outcome = await session.execute(
                    delete(WorkflowResumption)
                    .where(
                        WorkflowResumption.id == row.id,
                        WorkflowResumption.status == _SCHEDULED,
                    )
                    .execution_options(synchronize_session=False)
                )
                if outcome.rowcount == 1:
                    removed.append(_to_dto(row))
            return removed

    async def cancel_for_definition(
        self, organization_id: str, definition_id: str
    ) -> list[ResumptionDTO]:
        return await self._cancel_where(
            "cancel_resumptions_for_definition",
            WorkflowResumption.organization_id == organization_id,
            WorkflowResumption.workflow_definition_id == definition_id,
        )

    async def cancel_for_entity(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> list[ResumptionDTO]:
        return await self._cancel_where(
            "cancel_resumptions_for_entity",
            WorkflowResumption.organization_id == organization_id,
            WorkflowResumption.entity_type == entity_type,
            WorkflowResumption.entity_id == entity_id,
        )
