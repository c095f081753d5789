"""Application DTOs: data passed between use cases, handlers and repositories."""

from poam_automation.application.dtos.notification import (
    NotificationCreate,
    NotificationResult,
)
from poam_automation.application.dtos.task import TaskCreate, TaskResult
from poam_automation.application.dtos.workflow import (
    ResumptionRunResult,
    WorkflowResumption,
)

__all__ = [
    "NotificationCreate",
    "NotificationResult",
    "ResumptionRunResult",
    "TaskCreate",
    "TaskResult",
    "WorkflowResumption",
]
