"""Action chain executor: runs one workflow's ordered actions for one trigger event."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from poam_automation.application.actions.base import ActionContext
from poam_automation.application.dtos.workflow import WorkflowResumption
from poam_automation.application.services.condition_evaluator import evaluate_condition
from poam_automation.domain.exceptions import ActionHandlerError, PersistenceError
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import utc_now
from poam_automation.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from poam_automation.application.actions.registry import ActionHandlerRegistry
    from poam_automation.application.interfaces.repositories import IResumptionQueue
    from poam_automation.application.services.execution_recorder import ExecutionRecorder
    from poam_automation.domain.entities.workflow import (
        ActionConfig,
        WorkflowDefinitionEntity,
        WorkflowExecutionEntity,
    )

logger = get_logger(__name__)


class ActionChainExecutor:
    """Runs a definition's actions in order against one execution record.

    A delayed action suspends the run: the remainder is handed to the
    resumption queue and the execution stays running until the worker
    resumes it. Any exception raised by a handler fails the execution and
    skips the rest. PersistenceError from the recorder or the queue propagates.
    """

    def __init__(
        self,
        recorder: ExecutionRecorder,
        registry: ActionHandlerRegistry,
        resumption_queue: IResumptionQueue,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._recorder = recorder
        self._registry = registry
        self._queue = resumption_queue
        self._clock = clock

    async def run(
        self,
        definition: WorkflowDefinitionEntity,
        entity_type: str,
        entity_id: str,
        payload: dict[str, Any],
    ) -> WorkflowExecutionEntity:
        """Start a new execution and run the chain from the first action."""
        execution = await self._recorder.start(definition, entity_type, entity_id)
        return await self._run_from(definition, execution, payload, start_index=0, resumed=False)

    async def resume(
        self,
        definition: WorkflowDefinitionEntity,
        resumption: WorkflowResumption,
    ) -> WorkflowExecutionEntity:
        """Continue a suspended execution at the action whose delay elapsed."""
        execution = await self._recorder.load(resumption.execution_id)
        if execution.is_terminal:
            logger.warning(
                "Resumption %s targets finished execution %s (status=%s); ignoring",
                resumption.id,
                execution.id,
                execution.status.value,
            )
            return execution
        return await self._run_from(
            definition,
            execution,
            resumption.payload,
            start_index=resumption.action_index,
            resumed=True,
        )

    async def _run_from(
        self,
        definition: WorkflowDefinitionEntity,
        execution: WorkflowExecutionEntity,
        payload: dict[str, Any],
        *,
        start_index: int,
        resumed: bool,
    ) -> WorkflowExecutionEntity:
        context = ActionContext(
            organization_id=definition.organization_id,
            entity_type=execution.entity_type,
            entity_id=execution.entity_id,
            payload=payload,
            workflow_definition_id=definition.id,
            execution_id=execution.id,
        )

        for index in range(start_index, len(definition.actions)):
            action = definition.actions[index]
            # The resumed action already waited out its delay.
            if action.has_delay and not (resumed and index == start_index):
                await self._suspend(execution, definition, action, index, payload)
                return execution

            if action.condition is not None and not evaluate_condition(action.condition, payload):
                await self._recorder.record_skipped(
                    execution, index, action.type, "Condition not met"
                )
                continue

            # Storage failures inside a handler fail this run like any handler error.
            try:
                result = await self._execute_action(action, context)
            except (ActionHandlerError, PersistenceError) as e:
                await self._recorder.record_failure(execution, index, action.type, e.message)
                return await self._recorder.fail(execution, e.message)
            except Exception as e:
                logger.exception(
                    "Action %d (%s) of workflow execution %s raised unexpectedly (workflow_id=%s)",
                    index,
                    action.type,
                    execution.id,
                    definition.id,
                )
                message = str(e) or type(e).__name__
                await self._recorder.record_failure(execution, index, action.type, message)
                return await self._recorder.fail(execution, message)

            await self._recorder.record_success(execution, index, action.type, result)

        return await self._recorder.complete(execution)

    async def _execute_action(
        self, action: ActionConfig, context: ActionContext
    ) -> dict[str, Any]:
        handler = self._registry.get(action.action_type)
        return await handler.execute(context, action.config)

    async def _suspend(
        self,
        execution: WorkflowExecutionEntity,
        definition: WorkflowDefinitionEntity,
        action: ActionConfig,
        index: int,
        payload: dict[str, Any],
    ) -> None:
        fire_at = self._clock() + timedelta(seconds=action.delay or 0)
        await self._queue.schedule(
            WorkflowResumption(
                id=generate_cuid(),
                execution_id=execution.id,
                workflow_definition_id=definition.id,
                organization_id=definition.organization_id,
                entity_type=execution.entity_type,
                entity_id=execution.entity_id,
                action_index=index,
                payload=payload,
                fire_at=fire_at,
            )
        )
        logger.info(
            "Workflow execution %s suspended before action %d (%s) until %s (workflow_id=%s)",
            execution.id,
            index,
            action.type,
            fire_at.isoformat(),
            definition.id,
        )
