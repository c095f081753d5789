"""Workflow use cases: dispatch, chain execution, delayed resumption, triggers."""

from poam_automation.application.use_cases.workflows.chain_executor import ActionChainExecutor
from poam_automation.application.use_cases.workflows.dispatcher import WorkflowDispatcher
from poam_automation.application.use_cases.workflows.resume_delayed import (
    ResumeDelayedActionsUseCase,
    WorkflowCancellationService,
)
from poam_automation.application.use_cases.workflows.triggers import (
    WorkflowTriggers,
    days_overdue,
)

__all__ = [
    "ActionChainExecutor",
    "ResumeDelayedActionsUseCase",
    "WorkflowCancellationService",
    "WorkflowDispatcher",
    "WorkflowTriggers",
    "days_overdue",
]
