"""In-app notification actions: send_notification, escalate, create_reminder.

All three write notification rows through INotificationRepository; none
of them makes a network call or changes entity state.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from pydantic import Field

from poam_automation.application.actions.base import (
    ActionConfigModel,
    ActionContext,
    ActionHandler,
)
from poam_automation.application.dtos.notification import NotificationCreate
from poam_automation.application.services.message_interpolator import interpolate
from poam_automation.domain.enums import ActionType, NotificationPriority
from poam_automation.domain.exceptions import ActionHandlerError
from poam_automation.shared.enums import NotificationType
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from poam_automation.application.interfaces.repositories import (
        IEntityRepository,
        INotificationRepository,
    )
    from poam_automation.application.interfaces.services import IRecipientResolver

logger = get_logger(__name__)


def _entity_label(payload: dict[str, Any]) -> str:
    name = payload.get("entityName")
    return str(name) if name else "Item"


class SendNotificationConfig(ActionConfigModel):
    recipient_ids: list[str] = Field(default_factory=list)
    recipient_roles: list[str] = Field(default_factory=list)
    title: str = "Workflow Notification"
    message: str = "A workflow action was triggered"
    priority: NotificationPriority = NotificationPriority.MEDIUM


class SendNotificationHandler(ActionHandler[SendNotificationConfig]):
    """One notification per recipient (explicit ids plus members of the listed roles)."""

    action_type = ActionType.SEND_NOTIFICATION
    config_model = SendNotificationConfig

    def __init__(
        self,
        notification_repo: INotificationRepository,
        recipient_resolver: IRecipientResolver,
    ) -> None:
        self._notifications = notification_repo
        self._resolver = recipient_resolver

    async def handle(
        self, context: ActionContext, config: SendNotificationConfig
    ) -> dict[str, Any]:
        recipients = list(dict.fromkeys(config.recipient_ids))
        if config.recipient_roles:
            role_members = await self._resolver.get_user_ids_for_roles(
                context.organization_id, config.recipient_roles
            )
            for user_id in role_members:
                if user_id not in recipients:
                    recipients.append(user_id)

        if not recipients:
            logger.info(
                "send_notification: no recipients (organization_id=%s, workflow_id=%s)",
                context.organization_id,
                context.workflow_definition_id,
            )
            return {"recipient_count": 0, "notification_ids": []}

        title = interpolate(config.title, context.payload)
        message = interpolate(config.message, context.payload)
        created = await self._notifications.create_many(
            [
                NotificationCreate(
                    organization_id=context.organization_id,
                    recipient_id=recipient_id,
                    type=NotificationType.WORKFLOW_ACTION,
                    title=title,
                    message=message,
                    priority=config.priority,
                    entity_type=context.entity_type,
                    entity_id=context.entity_id,
                )
                for recipient_id in recipients
            ]
        )
        return {
            "recipient_count": len(created),
            "notification_ids": [n.id for n in created],
        }


class EscalateConfig(ActionConfigModel):
    escalate_to: str = Field(..., min_length=1)
    escalation_level: int = Field(default=1, ge=1)
    message: str | None = None


class EscalateHandler(ActionHandler[EscalateConfig]):
    """Urgent notification to the escalation target; entity state is left alone."""

    action_type = ActionType.ESCALATE
    config_model = EscalateConfig

    def __init__(self, notification_repo: INotificationRepository) -> None:
        self._notifications = notification_repo

    async def handle(self, context: ActionContext, config: EscalateConfig) -> dict[str, Any]:
        template = config.message or (
            f"Item has been escalated to level {config.escalation_level}"
        )
        [notification] = await self._notifications.create_many(
            [
                NotificationCreate(
                    organization_id=context.organization_id,
                    recipient_id=config.escalate_to,
                    type=NotificationType.ESCALATION,
                    title=f"Escalation: {_entity_label(context.payload)} requires attention",
                    message=interpolate(template, context.payload),
                    priority=NotificationPriority.URGENT,
                    entity_type=context.entity_type,
                    entity_id=context.entity_id,
                    data={"escalation_level": config.escalation_level},
                )
            ]
        )
        return {
            "escalated_to": config.escalate_to,
            "level": config.escalation_level,
            "notification_id": notification.id,
        }


class CreateReminderConfig(ActionConfigModel):
    recipient_id: str | None = None
    reminder_date: datetime | None = None
    reminder_type: str | None = None
    message: str = "This is a reminder about an important item"
    priority: NotificationPriority = NotificationPriority.MEDIUM


class CreateReminderHandler(ActionHandler[CreateReminderConfig]):
    """Future-dated notification for the entity's assignee (default: now + offset)."""

    action_type = ActionType.CREATE_REMINDER
    config_model = CreateReminderConfig

    def __init__(
        self,
        notification_repo: INotificationRepository,
        entity_repo: IEntityRepository,
        *,
        default_offset_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._notifications = notification_repo
        self._entities = entity_repo
        self._default_offset = timedelta(hours=default_offset_hours)
        self._clock = clock

    async def _resolve_recipient(
        self, context: ActionContext, config: CreateReminderConfig
    ) -> str | None:
        if config.recipient_id:
            return config.recipient_id
        assignee = await self._entities.get_assignee_id(context.entity_type, context.entity_id)
        if assignee:
            return assignee
        for key in ("assigneeId", "userId"):
            value = context.payload.get(key)
            if value:
                return str(value)
        return None

    async def handle(
        self, context: ActionContext, config: CreateReminderConfig
    ) -> dict[str, Any]:
        recipient_id = await self._resolve_recipient(context, config)
        if recipient_id is None:
            raise ActionHandlerError(
                f"No assignee to remind for {context.entity_type} {context.entity_id}",
                details={"entity_type": context.entity_type, "entity_id": context.entity_id},
            )
        reminder_date = ensure_utc(config.reminder_date) or (self._clock() + self._default_offset)
        data = {"reminder_type": config.reminder_type} if config.reminder_type else {}
        [notification] = await self._notifications.create_many(
            [
                NotificationCreate(
                    organization_id=context.organization_id,
                    recipient_id=recipient_id,
                    type=NotificationType.REMINDER,
                    title=f"Reminder: {_entity_label(context.payload)} needs attention",
                    message=interpolate(config.message, context.payload),
                    priority=config.priority,
                    entity_type=context.entity_type,
                    entity_id=context.entity_id,
                    scheduled_for=reminder_date,
                    data=data,
                )
            ]
        )
        return {
            "reminder_date": reminder_date.isoformat(),
            "recipient_id": recipient_id,
            "notification_id": notification.id,
        }
