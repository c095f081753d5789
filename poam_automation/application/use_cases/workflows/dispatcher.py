"""Trigger dispatcher: entry point for domain events."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from poam_automation.application.services.condition_evaluator import evaluate_conditions
from poam_automation.domain.exceptions import PersistenceError, WorkflowDispatchError
from poam_automation.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from poam_automation.application.interfaces.repositories import (
        IWorkflowDefinitionRepository,
    )
    from poam_automation.application.use_cases.workflows.chain_executor import (
        ActionChainExecutor,
    )
    from poam_automation.domain.entities.workflow import (
        WorkflowDefinitionEntity,
        WorkflowExecutionEntity,
    )

logger = get_logger(__name__)


class WorkflowDispatcher:
    """Finds the workflows matching a trigger event and runs each one independently.

    Runs execute concurrently, at most max_concurrent_runs at a time. A
    failing chain never blocks the others; runs that raise (persistence
    failures included) are collected and raised together once every run
    has finished.
    """

    def __init__(
        self,
        definition_repo: IWorkflowDefinitionRepository,
        chain_executor: ActionChainExecutor,
        *,
        max_concurrent_runs: int = 4,
    ) -> None:
        if max_concurrent_runs < 1:
            raise ValueError("max_concurrent_runs must be at least 1")
        self._definitions = definition_repo
        self._executor = chain_executor
        self._max_concurrent_runs = max_concurrent_runs

    async def dispatch(
        self,
        organization_id: str,
        trigger_type: str,
        entity_type: str,
        entity_id: str,
        payload: dict[str, Any] | None = None,
    ) -> list[WorkflowExecutionEntity]:
        """Run every active workflow of the organization whose trigger matches.

        Returns the executions in definition order (an execution may still
        be running when one of its actions is delayed).

        Raises:
            PersistenceError: The definitions could not be loaded.
            WorkflowDispatchError: One or more runs raised (persistence failures included).
        """
        payload = payload or {}
        definitions = await self._definitions.get_active_by_trigger(organization_id, trigger_type)
        matched = [
            d
            for d in definitions
            if d.belongs_to_organization(organization_id)
            and d.can_trigger_on(trigger_type)
            and evaluate_conditions(d.trigger_conditions, payload)
        ]
        logger.info(
            "Dispatching %s for %s %s: %d of %d workflow(s) matched (organization_id=%s)",
            trigger_type,
            entity_type,
            entity_id,
            len(matched),
            len(definitions),
            organization_id,
        )
        if not matched:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent_runs)

        async def run_one(definition: WorkflowDefinitionEntity) -> WorkflowExecutionEntity:
            async with semaphore:
                return await self._executor.run(definition, entity_type, entity_id, payload)

        outcomes = await asyncio.gather(
            *(run_one(d) for d in matched), return_exceptions=True
        )

        executions: list[WorkflowExecutionEntity] = []
        errors: list[tuple[str, Exception]] = []
        for definition, outcome in zip(matched, outcomes, strict=True):
            if isinstance(outcome, PersistenceError):
                logger.error(
                    "Workflow %s could not persist its execution: %s (organization_id=%s)",
                    definition.id,
                    outcome.message,
                    organization_id,
                )
                errors.append((definition.id, outcome))
            elif isinstance(outcome, Exception):
                logger.error(
                    "Workflow %s run raised unexpectedly (organization_id=%s)",
                    definition.id,
                    organization_id,
                    exc_info=outcome,
                )
                errors.append((definition.id, outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                executions.append(outcome)

        if errors:
            raise WorkflowDispatchError(errors, executions)
        return executions
