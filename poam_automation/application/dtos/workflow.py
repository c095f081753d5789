"""DTOs for chain runs: delayed resumptions and worker summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from poam_automation.shared.utils.datetime import parse_iso_datetime


@dataclass(frozen=True)
class WorkflowResumption:
    """The pending remainder of a suspended chain run.

    action_index is the action whose delay is elapsing; the chain resumes
    by executing that action (without delaying it again).
    """

    id: str
    execution_id: str
    workflow_definition_id: str
    organization_id: str
    entity_type: str
    entity_id: str
    action_index: int
    payload: dict[str, Any]
    fire_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize for queues that store JSON (fire_at as ISO-8601)."""
        return {
            "id": self.id,
            "execution_id": self.execution_id,
            "workflow_definition_id": self.workflow_definition_id,
            "organization_id": self.organization_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action_index": self.action_index,
            "payload": self.payload,
            "fire_at": self.fire_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowResumption:
        """Deserialize from to_dict() output."""
        return cls(
            id=data["id"],
            execution_id=data["execution_id"],
            workflow_definition_id=data["workflow_definition_id"],
            organization_id=data["organization_id"],
            entity_type=data["entity_type"],
            entity_id=data["entity_id"],
            action_index=int(data["action_index"]),
            payload=dict(data.get("payload") or {}),
            fire_at=parse_iso_datetime(data["fire_at"]),
        )


@dataclass(frozen=True)
class ResumptionRunResult:
    """Result of one pass of the delayed-action worker."""

    claimed: int = 0
    resumed: int = 0
    cancelled: int = 0
    error_execution_ids: tuple[str, ...] = field(default_factory=tuple)
    reclaimed: int = 0
