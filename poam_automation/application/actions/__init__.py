"""Workflow action handlers."""

from poam_automation.application.actions.base import (
    ActionConfigModel,
    ActionContext,
    ActionHandler,
)
from poam_automation.application.actions.email import SendEmailHandler
from poam_automation.application.actions.entities import (
    AssignUserHandler,
    CreateTaskHandler,
    UpdateStatusHandler,
)
from poam_automation.application.actions.notifications import (
    CreateReminderHandler,
    EscalateHandler,
    SendNotificationHandler,
)
from poam_automation.application.actions.outbound import (
    SlackNotificationHandler,
    TeamsNotificationHandler,
    WebhookHandler,
)
from poam_automation.application.actions.registry import ActionHandlerRegistry

__all__ = [
    "ActionConfigModel",
    "ActionContext",
    "ActionHandler",
    "ActionHandlerRegistry",
    "AssignUserHandler",
    "CreateReminderHandler",
    "CreateTaskHandler",
    "EscalateHandler",
    "SendEmailHandler",
    "SendNotificationHandler",
    "SlackNotificationHandler",
    "TeamsNotificationHandler",
    "UpdateStatusHandler",
    "WebhookHandler",
]
