"""Application use cases: one entry point per workflow."""

from poam_automation.application.use_cases.workflows import (
    ActionChainExecutor,
    ResumeDelayedActionsUseCase,
    WorkflowCancellationService,
    WorkflowDispatcher,
    WorkflowTriggers,
)

__all__ = [
    "ActionChainExecutor",
    "ResumeDelayedActionsUseCase",
    "WorkflowCancellationService",
    "WorkflowDispatcher",
    "WorkflowTriggers",
]
