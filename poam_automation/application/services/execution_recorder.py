"""Execution recorder: sole writer of workflow execution rows.

Insert on start, update after each log entry and on finish. Every write
goes straight to the repository; PersistenceError is never swallowed,
because a row stuck in "running" cannot be told apart from a live run.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from poam_automation.domain.entities.workflow import (
    WorkflowDefinitionEntity,
    WorkflowExecutionEntity,
)
from poam_automation.domain.exceptions import PersistenceError
from poam_automation.shared.enums import ActionOutcomeStatus
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import utc_now
from poam_automation.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from poam_automation.application.interfaces.repositories import (
        IWorkflowExecutionRepository,
    )

logger = get_logger(__name__)


class ExecutionRecorder:
    """Owns the lifecycle writes of WorkflowExecution rows."""

    def __init__(
        self,
        execution_repo: IWorkflowExecutionRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo = execution_repo
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def start(
        self,
        definition: WorkflowDefinitionEntity,
        entity_type: str,
        entity_id: str,
    ) -> WorkflowExecutionEntity:
        """Create the execution (pending -> running) and insert it."""
        execution = WorkflowExecutionEntity(
            id=generate_cuid(),
            workflow_definition_id=definition.id,
            organization_id=definition.organization_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        execution.mark_running(self._clock())
        await self._repo.insert(execution)
        logger.debug(
            "Workflow execution %s started (workflow_id=%s, organization_id=%s)",
            execution.id,
            definition.id,
            definition.organization_id,
        )
        return execution

    async def load(self, execution_id: str) -> WorkflowExecutionEntity:
        """Return an existing execution. Raises PersistenceError when the row is gone."""
        execution = await self._repo.get_by_id(execution_id)
        if execution is None:
            raise PersistenceError(
                "load_execution",
                f"execution {execution_id} not found",
                {"execution_id": execution_id},
            )
        return execution

    async def record_success(
        self,
        execution: WorkflowExecutionEntity,
        action_index: int,
        action_type: str,
        result: dict[str, Any],
    ) -> dict[str, Any]:
        return await self._record(
            execution,
            {
                "action_index": action_index,
                "action_type": action_type,
                "timestamp": self._clock().isoformat(),
                "status": ActionOutcomeStatus.SUCCESS.value,
                "result": result,
            },
        )

    async def record_skipped(
        self,
        execution: WorkflowExecutionEntity,
        action_index: int,
        action_type: str,
        reason: str,
    ) -> dict[str, Any]:
        return await self._record(
            execution,
            {
                "action_index": action_index,
                "action_type": action_type,
                "timestamp": self._clock().isoformat(),
                "status": ActionOutcomeStatus.SKIPPED.value,
                "reason": reason,
            },
        )

    async def record_failure(
        self,
        execution: WorkflowExecutionEntity,
        action_index: int,
        action_type: str,
        error: str,
    ) -> dict[str, Any]:
        return await self._record(
            execution,
            {
                "action_index": action_index,
                "action_type": action_type,
                "timestamp": self._clock().isoformat(),
                "status": ActionOutcomeStatus.FAILED.value,
                "error": error,
            },
        )

    async def _record(
        self, execution: WorkflowExecutionEntity, entry: dict[str, Any]
    ) -> dict[str, Any]:
        execution.append_entry(entry)
        await self._repo.save(execution)
        return entry

    async def complete(self, execution: WorkflowExecutionEntity) -> WorkflowExecutionEntity:
        """Finalize as completed. Raises PersistenceError if the write fails."""
        execution.mark_completed(self._clock())
        await self._repo.save(execution)
        logger.info(
            "Workflow execution %s completed (workflow_id=%s, actions_logged=%d)",
            execution.id,
            execution.workflow_definition_id,
            len(execution.execution_log),
        )
        return execution

    async def fail(
        self, execution: WorkflowExecutionEntity, error_message: str
    ) -> WorkflowExecutionEntity:
        """Finalize as failed with error_message. Raises PersistenceError if the write fails."""
        execution.mark_failed(self._clock(), error_message)
        await self._repo.save(execution)
        logger.warning(
            "Workflow execution %s failed (workflow_id=%s): %s",
            execution.id,
            execution.workflow_definition_id,
            error_message,
        )
        return execution
