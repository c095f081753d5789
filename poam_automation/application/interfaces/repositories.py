"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
Implementations raise PersistenceError when the underlying store fails.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from poam_automation.application.dtos.notification import (
        NotificationCreate,
        NotificationResult,
    )
    from poam_automation.application.dtos.task import TaskCreate, TaskResult
    from poam_automation.application.dtos.workflow import WorkflowResumption
    from poam_automation.domain.entities.workflow import (
        WorkflowDefinitionEntity,
        WorkflowExecutionEntity,
    )


# Workflow definition repository interface
class IWorkflowDefinitionRepository(Protocol):
    """Protocol for reading workflow definitions (written by the CRUD layer)."""

    async def get_active_by_trigger(
        self, organization_id: str, trigger_type: str
    ) -> list[WorkflowDefinitionEntity]:
        """Return active definitions for (organization, trigger type), in execution order."""

    async def get_by_id(
        self, organization_id: str, definition_id: str
    ) -> WorkflowDefinitionEntity | None:
        """Return one definition of the organization (active or not), or None."""


# Workflow execution repository interface
class IWorkflowExecutionRepository(Protocol):
    """Protocol for execution rows. Only the ExecutionRecorder calls this."""

    async def insert(self, execution: WorkflowExecutionEntity) -> None:
        """Insert a new execution row."""

    async def save(self, execution: WorkflowExecutionEntity) -> None:
        """Persist status, timestamps, log and error message of an existing row."""

    async def get_by_id(self, execution_id: str) -> WorkflowExecutionEntity | None:
        """Return the execution, or None."""


# Compliance entity repository interface
class IEntityRepository(Protocol):
    """Protocol for the compliance entities workflow actions read and mutate."""

    async def exists(self, entity_type: str, entity_id: str) -> bool:
        """Return whether the entity exists (unknown entity types return False)."""

    async def update_status(self, entity_type: str, entity_id: str, status: str) -> bool:
        """Set the status field. Returns False when no such entity exists."""

    async def assign(self, entity_type: str, entity_id: str, user_id: str) -> bool:
        """Set the assignee field. Returns False when no such entity exists."""

    async def get_assignee_id(self, entity_type: str, entity_id: str) -> str | None:
        """Return the entity's current assignee/owner user id, or None."""

    async def get_or_create_workflow_milestone(
        self, organization_id: str, poam_item_id: str
    ) -> str:
        """Return the id of the item's workflow-task milestone, creating it on first use."""

    async def get_task_milestone_id(self, task_id: str) -> str | None:
        """Return the milestone id of a task, or None when the task does not exist."""

    async def create_task(self, data: TaskCreate) -> TaskResult:
        """Create a follow-up task under a milestone."""


# Notification repository interface
class INotificationRepository(Protocol):
    """Protocol for notification rows (in-app notifications and reminders)."""

    async def create_many(
        self, notifications: list[NotificationCreate]
    ) -> list[NotificationResult]:
        """Persist all notifications in one transaction; return them in input order."""


# Resumption queue interface
class IResumptionQueue(Protocol):
    """Durable queue of suspended chain remainders keyed by execution + action index.

    Claiming is atomic: a resumption is handed to one worker at a time.
    A claim that is never released is a lease returned by reclaim_stale.
    """

    async def schedule(self, resumption: WorkflowResumption) -> None:
        """Persist a resumption to fire at resumption.fire_at."""

    async def claim_due(self, now: datetime, limit: int) -> list[WorkflowResumption]:
        """Claim and return up to limit resumptions whose fire_at <= now, oldest first."""

    async def release(self, resumption_id: str) -> None:
        """Remove a claimed resumption once its chain has been resumed or cancelled."""

    async def reclaim_stale(self, claimed_before: datetime) -> list[WorkflowResumption]:
        """Return resumptions claimed before claimed_before to the queue; return them."""

    async def cancel_for_definition(
        self, organization_id: str, definition_id: str
    ) -> list[WorkflowResumption]:
        """Remove unclaimed resumptions of a definition; return what was removed."""

    async def cancel_for_entity(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> list[WorkflowResumption]:
        """Remove unclaimed resumptions targeting an entity; return what was removed."""
