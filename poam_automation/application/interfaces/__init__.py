"""Application interfaces (ports).

Protocols for repositories and external collaborators. Infrastructure
provides the implementations; tests provide in-memory fakes.
"""

from poam_automation.application.interfaces.repositories import (
    IEntityRepository,
    INotificationRepository,
    IResumptionQueue,
    IWorkflowDefinitionRepository,
    IWorkflowExecutionRepository,
)
from poam_automation.application.interfaces.services import (
    IEmailTemplateRenderer,
    IMailGateway,
    IRecipientResolver,
)

__all__ = [
    "IEmailTemplateRenderer",
    "IEntityRepository",
    "IMailGateway",
    "INotificationRepository",
    "IRecipientResolver",
    "IResumptionQueue",
    "IWorkflowDefinitionRepository",
    "IWorkflowExecutionRepository",
]
