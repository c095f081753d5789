"""Outbound network actions: webhook, slack_notification, teams_notification.

Every call carries an explicit timeout. A timeout, a transport error or
a non-2xx answer fails the action.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any, Literal

import httpx
from pydantic import Field, field_validator

from poam_automation.application.actions.base import (
    ActionConfigModel,
    ActionContext,
    ActionHandler,
    effective_timeout,
    ensure_success,
    send_request,
)
from poam_automation.application.services.message_interpolator import interpolate
from poam_automation.domain.enums import ActionType
from poam_automation.shared.utils.datetime import utc_now

TEAMS_THEME_COLOR = "0078D4"


def _check_http_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return value


def _entity_fact(context: ActionContext) -> str:
    name = context.payload.get("entityName") or context.entity_id
    return f"{context.entity_type}: {name}"


class _OutboundHandler[ConfigT: ActionConfigModel](ActionHandler[ConfigT]):
    """Shared HTTP client and timeout budget for network actions."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        default_timeout_seconds: float,
        max_timeout_seconds: float,
    ) -> None:
        self._http = http_client
        self._default_timeout = default_timeout_seconds
        self._max_timeout = max_timeout_seconds

    def _timeout(self, requested: float | None) -> float:
        return effective_timeout(requested, self._default_timeout, self._max_timeout)


class WebhookConfig(ActionConfigModel):
    webhook_url: str
    webhook_method: Literal["GET", "POST", "PUT"] = "POST"
    webhook_headers: dict[str, str] = Field(default_factory=dict)
    webhook_body: dict[str, Any] = Field(default_factory=dict)
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("webhook_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return _check_http_url(value)


class WebhookHandler(_OutboundHandler[WebhookConfig]):
    """Calls an arbitrary HTTP endpoint with the trigger payload and a timestamp.

    Body: webhookBody merged with {"triggerData": payload, "timestamp": iso}.
    GET requests carry no body.
    """

    action_type = ActionType.WEBHOOK
    config_model = WebhookConfig

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        default_timeout_seconds: float,
        max_timeout_seconds: float,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(
            http_client,
            default_timeout_seconds=default_timeout_seconds,
            max_timeout_seconds=max_timeout_seconds,
        )
        self._clock = clock

    async def handle(self, context: ActionContext, config: WebhookConfig) -> dict[str, Any]:
        headers = {"Content-Type": "application/json", **config.webhook_headers}
        body = None
        if config.webhook_method != "GET":
            body = {
                **config.webhook_body,
                "triggerData": context.payload,
                "timestamp": self._clock().isoformat(),
            }
        response = await send_request(
            self._http,
            config.webhook_method,
            config.webhook_url,
            timeout_seconds=self._timeout(config.timeout_seconds),
            json_body=body,
            headers=headers,
        )
        ensure_success(response, config.webhook_url)
        return {
            "status": response.status_code,
            "status_text": response.reason_phrase,
            "success": response.is_success,
        }


class ChatNotificationConfig(ActionConfigModel):
    webhook_url: str
    message: str = "Workflow notification"
    title: str = "Workflow Notification"
    channel_id: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("webhook_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return _check_http_url(value)


class _ChatNotificationHandler(_OutboundHandler[ChatNotificationConfig]):
    """Posts a provider-specific message card to an incoming-webhook URL."""

    config_model = ChatNotificationConfig

    @abstractmethod
    def build_card(
        self, context: ActionContext, config: ChatNotificationConfig, message: str
    ) -> dict[str, Any]:
        """Return the provider-specific JSON card for message."""

    async def handle(
        self, context: ActionContext, config: ChatNotificationConfig
    ) -> dict[str, Any]:
        message = interpolate(config.message, context.payload)
        response = await send_request(
            self._http,
            "POST",
            config.webhook_url,
            timeout_seconds=self._timeout(config.timeout_seconds),
            json_body=self.build_card(context, config, message),
            headers={"Content-Type": "application/json"},
        )
        ensure_success(response, config.webhook_url)
        return {"status": response.status_code, "success": response.is_success}


class SlackNotificationHandler(_ChatNotificationHandler):
    action_type = ActionType.SLACK_NOTIFICATION

    def build_card(
        self, context: ActionContext, config: ChatNotificationConfig, message: str
    ) -> dict[str, Any]:
        card: dict[str, Any] = {
            "text": message,
            "attachments": [
                {
                    "color": "warning",
                    "fields": [
                        {"title": "Entity", "value": _entity_fact(context), "short": True}
                    ],
                }
            ],
        }
        if config.channel_id:
            card["channel"] = config.channel_id
        return card


class TeamsNotificationHandler(_ChatNotificationHandler):
    action_type = ActionType.TEAMS_NOTIFICATION

    def build_card(
        self, context: ActionContext, config: ChatNotificationConfig, message: str
    ) -> dict[str, Any]:
        title = interpolate(config.title, context.payload)
        return {
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": title,
            "themeColor": TEAMS_THEME_COLOR,
            "sections": [
                {
                    "activityTitle": title,
                    "activitySubtitle": message,
                    "facts": [{"name": "Entity", "value": _entity_fact(context)}],
                }
            ],
        }
