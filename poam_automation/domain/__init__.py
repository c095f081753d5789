"""Domain layer: workflow entities, enums, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from poam_automation.domain.entities import (
    ActionConfig,
    Condition,
    WorkflowDefinitionEntity,
    WorkflowExecutionEntity,
)
from poam_automation.domain.enums import (
    ActionType,
    ConditionOperator,
    EntityType,
    NotificationPriority,
    TriggerType,
)
from poam_automation.domain.exceptions import (
    ActionHandlerError,
    ConfigurationException,
    InvalidExecutionTransition,
    NetworkTimeoutError,
    PersistenceError,
    PoamAutomationException,
    WorkflowDispatchError,
)

__all__ = [
    # Entities
    "ActionConfig",
    "Condition",
    "WorkflowDefinitionEntity",
    "WorkflowExecutionEntity",
    # Enums
    "ActionType",
    "ConditionOperator",
    "EntityType",
    "NotificationPriority",
    "TriggerType",
    # Exceptions
    "ActionHandlerError",
    "ConfigurationException",
    "InvalidExecutionTransition",
    "NetworkTimeoutError",
    "PersistenceError",
    "PoamAutomationException",
    "WorkflowDispatchError",
]
