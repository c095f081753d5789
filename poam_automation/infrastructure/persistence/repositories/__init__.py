"""Persistence repositories. Re-exports for dependency injection."""

from poam_automation.infrastructure.persistence.repositories.base import BaseRepository
from poam_automation.infrastructure.persistence.repositories.entity_repo import (
    EntityRepository,
)
from poam_automation.infrastructure.persistence.repositories.execution_repo import (
    WorkflowExecutionRepository,
)
from poam_automation.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from poam_automation.infrastructure.persistence.repositories.resumption_repo import (
    SqlResumptionQueue,
)
from poam_automation.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowDefinitionRepository,
)

__all__ = [
    "BaseRepository",
    "EntityRepository",
    "NotificationRepository",
    "SqlResumptionQueue",
    "WorkflowDefinitionRepository",
    "WorkflowExecutionRepository",
]
