"""Persistence models: ORM entities and mixins."""

from poam_automation.infrastructure.persistence.models.compliance import (
    AppUser,
    Evidence,
    Milestone,
    OrganizationMembership,
    PoamItem,
    Task,
)
from poam_automation.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    OrganizationMixin,
    TimestampMixin,
)
from poam_automation.infrastructure.persistence.models.notification import Notification
from poam_automation.infrastructure.persistence.models.workflow import (
    WorkflowDefinition,
    WorkflowExecution,
    WorkflowResumption,
)

__all__ = [
    "AppUser",
    "CuidMixin",
    "Evidence",
    "Milestone",
    "MultiTenantModel",
    "Notification",
    "OrganizationMembership",
    "OrganizationMixin",
    "PoamItem",
    "Task",
    "TimestampMixin",
    "WorkflowDefinition",
    "WorkflowExecution",
    "WorkflowResumption",
]
