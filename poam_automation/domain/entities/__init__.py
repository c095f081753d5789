"""Domain entities.

Pure domain models; no ORM or persistence concerns.
"""

from poam_automation.domain.entities.workflow import (
    ActionConfig,
    Condition,
    WorkflowDefinitionEntity,
    WorkflowExecutionEntity,
)

__all__ = [
    "ActionConfig",
    "Condition",
    "WorkflowDefinitionEntity",
    "WorkflowExecutionEntity",
]
