"""Delayed-action worker and cancellation of suspended chain runs."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from poam_automation.application.dtos.workflow import ResumptionRunResult, WorkflowResumption
from poam_automation.domain.exceptions import PersistenceError
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from poam_automation.application.interfaces.repositories import (
        IEntityRepository,
        IResumptionQueue,
        IWorkflowDefinitionRepository,
    )
    from poam_automation.application.services.execution_recorder import ExecutionRecorder
    from poam_automation.application.use_cases.workflows.chain_executor import (
        ActionChainExecutor,
    )

logger = get_logger(__name__)


async def _cancel_execution(
    recorder: ExecutionRecorder, execution_id: str, reason: str
) -> bool:
    """Finalize a suspended execution as failed. Returns False if it had already finished."""
    execution = await recorder.load(execution_id)
    if execution.is_terminal:
        return False
    await recorder.fail(execution, f"Cancelled: {reason}")
    return True


class ResumeDelayedActionsUseCase:
    """Claims due resumptions and continues (or cancels) their chains.

    Before resuming, the definition must still exist and be active and the
    target entity must still exist; otherwise the execution is cancelled.

    A claim is a lease: resumptions still claimed claim_timeout_seconds
    after they were claimed (worker crash, storage error) are put back on
    the queue and resumed again. A resumption is therefore processed at
    least once; resuming an already finished execution is a no-op.
    """

    def __init__(
        self,
        resumption_queue: IResumptionQueue,
        definition_repo: IWorkflowDefinitionRepository,
        entity_repo: IEntityRepository,
        recorder: ExecutionRecorder,
        chain_executor: ActionChainExecutor,
        *,
        batch_size: int = 100,
        claim_timeout_seconds: float = 300.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if claim_timeout_seconds <= 0:
            raise ValueError("claim_timeout_seconds must be positive")
        self._queue = resumption_queue
        self._definitions = definition_repo
        self._entities = entity_repo
        self._recorder = recorder
        self._executor = chain_executor
        self._batch_size = batch_size
        self._claim_timeout = timedelta(seconds=claim_timeout_seconds)
        self._clock = clock

    async def run_due(self, now: datetime | None = None) -> ResumptionRunResult:
        """Process every resumption due at now (default: the clock's now).

        Expired claims are returned to the queue first. A failure on one
        resumption is logged and reported in error_execution_ids; that
        resumption stays claimed until its lease expires and the rest of
        the batch is still processed. A failure to reclaim or claim propagates.
        """
        now = now or self._clock()
        reclaimed = await self._queue.reclaim_stale(now - self._claim_timeout)
        if reclaimed:
            logger.warning(
                "Returned %d expired resumption claim(s) to the queue: %s",
                len(reclaimed),
                ", ".join(r.id for r in reclaimed),
            )
        due = await self._queue.claim_due(now, self._batch_size)
        resumed = cancelled = 0
        errors: list[str] = []
        for resumption in due:
            try:
                if await self._process(resumption):
                    resumed += 1
                else:
                    cancelled += 1
                await self._queue.release(resumption.id)
            except PersistenceError as e:
                logger.error(
                    "Resumption %s of execution %s failed: %s",
                    resumption.id,
                    resumption.execution_id,
                    e.message,
                )
                errors.append(resumption.execution_id)
            except Exception:
                logger.exception(
                    "Resumption %s of execution %s raised unexpectedly",
                    resumption.id,
                    resumption.execution_id,
                )
                errors.append(resumption.execution_id)

        if due:
            logger.info(
                "Delayed actions: claimed=%d resumed=%d cancelled=%d errors=%d",
                len(due),
                resumed,
                cancelled,
                len(errors),
            )
        return ResumptionRunResult(
            claimed=len(due),
            resumed=resumed,
            cancelled=cancelled,
            error_execution_ids=tuple(errors),
            reclaimed=len(reclaimed),
        )

    async def _process(self, resumption: WorkflowResumption) -> bool:
        """Resume the chain; returns False when it was cancelled instead."""
        definition = await self._definitions.get_by_id(
            resumption.organization_id, resumption.workflow_definition_id
        )
        if definition is None or not definition.is_active:
            await _cancel_execution(
                self._recorder,
                resumption.execution_id,
                f"workflow definition {resumption.workflow_definition_id} is no longer active",
            )
            return False
        if not await self._entities.exists(resumption.entity_type, resumption.entity_id):
            await _cancel_execution(
                self._recorder,
                resumption.execution_id,
                f"{resumption.entity_type} {resumption.entity_id} no longer exists",
            )
            return False

        await self._executor.resume(definition, resumption)
        return True

    async def run_forever(
        self,
        poll_interval_seconds: float,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Poll run_due() every poll_interval_seconds until stop_event is set."""
        stop_event = stop_event or asyncio.Event()
        logger.info("Delayed-action worker started (poll_interval=%ss)", poll_interval_seconds)
        while not stop_event.is_set():
            try:
                await self.run_due()
            except PersistenceError as e:
                logger.error("Delayed-action poll failed: %s", e.message)
            except Exception:
                logger.exception("Delayed-action poll raised unexpectedly")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=poll_interval_seconds)
            except TimeoutError:
                pass
        logger.info("Delayed-action worker stopped")


class WorkflowCancellationService:
    """Cancels suspended runs when their definition or target entity goes away.

    Called by the code that deactivates or deletes definitions and entities.
    """

    def __init__(
        self,
        resumption_queue: IResumptionQueue,
        recorder: ExecutionRecorder,
    ) -> None:
        self._queue = resumption_queue
        self._recorder = recorder

    async def cancel_for_definition(
        self, organization_id: str, definition_id: str
    ) -> list[str]:
        """Cancel every pending run of a definition. Returns the cancelled execution ids."""
        removed = await self._queue.cancel_for_definition(organization_id, definition_id)
        return await self._cancel_all(
            removed, f"workflow definition {definition_id} was deactivated or deleted"
        )

    async def cancel_for_entity(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> list[str]:
        """Cancel every pending run targeting an entity. Returns the cancelled execution ids."""
        removed = await self._queue.cancel_for_entity(organization_id, entity_type, entity_id)
        return await self._cancel_all(removed, f"{entity_type} {entity_id} was deleted")

    async def _cancel_all(
        self, removed: list[WorkflowResumption], reason: str
    ) -> list[str]:
        cancelled: list[str] = []
        for resumption in removed:
            if await _cancel_execution(self._recorder, resumption.execution_id, reason):
                cancelled.append(resumption.execution_id)
        if cancelled:
            logger.info(
                "Cancelled %d suspended workflow execution(s): %s",
                len(cancelled),
                reason,
            )
        return cancelled
