"""Trigger helpers: build the payload for common domain events and dispatch it.

Every payload starts with {"entityType", "entityId"}; caller-supplied
extra data is merged last and may override the computed keys.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from poam_automation.domain.enums import EntityType, TriggerType
from poam_automation.shared.utils.datetime import ensure_utc, parse_iso_datetime, utc_now

if TYPE_CHECKING:
    from poam_automation.application.use_cases.workflows.dispatcher import WorkflowDispatcher
    from poam_automation.domain.entities.workflow import WorkflowExecutionEntity

SECONDS_PER_DAY = 86400


def days_overdue(due_date: datetime, now: datetime) -> int:
    """Whole days elapsed since due_date (floored; negative before the due date)."""
    delta = ensure_utc(now) - ensure_utc(due_date)
    return int(delta.total_seconds() // SECONDS_PER_DAY)


def build_payload(
    entity_type: str, entity_id: str, extra: dict[str, Any] | None = None, **fields: Any
) -> dict[str, Any]:
    return {"entityType": entity_type, "entityId": entity_id, **fields, **(extra or {})}


class WorkflowTriggers:
    """Convenience entry points over WorkflowDispatcher.dispatch()."""

    def __init__(
        self,
        dispatcher: WorkflowDispatcher,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._dispatcher = dispatcher
        self._clock = clock

    async def trigger_status_change(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        old_status: str,
        new_status: str,
        extra: dict[str, Any] | None = None,
    ) -> list[WorkflowExecutionEntity]:
        payload = build_payload(
            entity_type, entity_id, extra, oldStatus=old_status, newStatus=new_status
        )
        return await self._dispatcher.dispatch(
            organization_id, TriggerType.STATUS_CHANGE.value, entity_type, entity_id, payload
        )

    async def trigger_overdue_item(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        due_date: datetime | str,
        extra: dict[str, Any] | None = None,
    ) -> list[WorkflowExecutionEntity]:
        """Dispatch an overdue trigger; daysOverdue is computed from due_date."""
        due = parse_iso_datetime(due_date) if isinstance(due_date, str) else ensure_utc(due_date)
        payload = build_payload(
            entity_type,
            entity_id,
            extra,
            dueDate=due.isoformat(),
            daysOverdue=days_overdue(due, self._clock()),
        )
        return await self._dispatcher.dispatch(
            organization_id, TriggerType.OVERDUE.value, entity_type, entity_id, payload
        )

    async def trigger_milestone_completion(
        self,
        organization_id: str,
        milestone_id: str,
        extra: dict[str, Any] | None = None,
    ) -> list[WorkflowExecutionEntity]:
        entity_type = EntityType.MILESTONE.value
        return await self._dispatcher.dispatch(
            organization_id,
            TriggerType.MILESTONE_COMPLETION.value,
            entity_type,
            milestone_id,
            build_payload(entity_type, milestone_id, extra),
        )

    async def trigger_evidence_uploaded(
        self,
        organization_id: str,
        evidence_id: str,
        extra: dict[str, Any] | None = None,
    ) -> list[WorkflowExecutionEntity]:
        entity_type = EntityType.EVIDENCE.value
        return await self._dispatcher.dispatch(
            organization_id,
            TriggerType.EVIDENCE_UPLOADED.value,
            entity_type,
            evidence_id,
            build_payload(entity_type, evidence_id, extra),
        )
