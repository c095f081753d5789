"""Application layer: ports, action handlers, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, queues, gateways).
"""

from poam_automation.application.actions import ActionHandlerRegistry
from poam_automation.application.interfaces import (
    IEmailTemplateRenderer,
    IEntityRepository,
    IMailGateway,
    INotificationRepository,
    IRecipientResolver,
    IResumptionQueue,
    IWorkflowDefinitionRepository,
    IWorkflowExecutionRepository,
)
from poam_automation.application.services.execution_recorder import ExecutionRecorder
from poam_automation.application.use_cases.workflows import (
    ActionChainExecutor,
    ResumeDelayedActionsUseCase,
    WorkflowCancellationService,
    WorkflowDispatcher,
    WorkflowTriggers,
)

__all__ = [
    "ActionChainExecutor",
    "ActionHandlerRegistry",
    "ExecutionRecorder",
    "IEmailTemplateRenderer",
    "IEntityRepository",
    "IMailGateway",
    "INotificationRepository",
    "IRecipientResolver",
    "IResumptionQueue",
    "IWorkflowDefinitionRepository",
    "IWorkflowExecutionRepository",
    "ResumeDelayedActionsUseCase",
    "WorkflowCancellationService",
    "WorkflowDispatcher",
    "WorkflowTriggers",
]
