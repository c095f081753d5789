"""send_email action: render subject/body and hand them to the mail gateway."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import Field

from poam_automation.application.actions.base import (
    ActionConfigModel,
    ActionContext,
    ActionHandler,
)
from poam_automation.application.services.message_interpolator import interpolate
from poam_automation.domain.enums import ActionType
from poam_automation.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from poam_automation.application.interfaces.services import (
        IEmailTemplateRenderer,
        IMailGateway,
        IRecipientResolver,
    )

logger = get_logger(__name__)


class SendEmailConfig(ActionConfigModel):
    recipient_emails: list[str] = Field(default_factory=list)
    recipient_ids: list[str] = Field(default_factory=list)
    recipient_roles: list[str] = Field(default_factory=list)
    email_template: str | None = None
    email_subject: str = "Workflow Alert"
    email_body: str = "A workflow was triggered"


class SendEmailHandler(ActionHandler[SendEmailConfig]):
    """Sends one message to every resolved address.

    With emailTemplate set, subject/body come from the named template;
    otherwise emailSubject/emailBody are interpolated. Gateway failures
    and timeouts propagate as ActionHandlerError.
    """

    action_type = ActionType.SEND_EMAIL
    config_model = SendEmailConfig

    def __init__(
        self,
        mail_gateway: IMailGateway,
        recipient_resolver: IRecipientResolver,
        template_renderer: IEmailTemplateRenderer,
    ) -> None:
        self._gateway = mail_gateway
        self._resolver = recipient_resolver
        self._templates = template_renderer

    async def _resolve_addresses(
        self, context: ActionContext, config: SendEmailConfig
    ) -> list[str]:
        user_ids = list(config.recipient_ids)
        if config.recipient_roles:
            user_ids.extend(
                await self._resolver.get_user_ids_for_roles(
                    context.organization_id, config.recipient_roles
                )
            )
        addresses = list(config.recipient_emails)
        if user_ids:
            addresses.extend(
                await self._resolver.get_emails_for_users(
                    context.organization_id, list(dict.fromkeys(user_ids))
                )
            )
        return list(dict.fromkeys(a for a in addresses if a))

    async def handle(self, context: ActionContext, config: SendEmailConfig) -> dict[str, Any]:
        addresses = await self._resolve_addresses(context, config)
        if not addresses:
            logger.info(
                "send_email: no recipients, skipping send (organization_id=%s, workflow_id=%s)",
                context.organization_id,
                context.workflow_definition_id,
            )
            return {"status": "skipped", "recipient_count": 0}

        if config.email_template:
            subject, body = self._templates.render(
                config.email_template,
                context.payload,
                {"entity_type": context.entity_type, "entity_id": context.entity_id},
            )
        else:
            subject = interpolate(config.email_subject, context.payload)
            body = interpolate(config.email_body, context.payload)

        gateway_result = await self._gateway.send(addresses, subject, body)
        return {
            "status": "sent",
            "recipient_count": len(addresses),
            "gateway": gateway_result,
        }
