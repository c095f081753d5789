"""Tests for webhook, slack_notification and teams_notification handlers."""

import json

import httpx
import pytest

from poam_automation.application.actions import (
    ActionContext,
    SlackNotificationHandler,
    TeamsNotificationHandler,
    WebhookHandler,
)
from poam_automation.application.actions.base import redact_url
from poam_automation.application.actions.outbound import _ChatNotificationHandler
from poam_automation.domain.enums import ActionType
from poam_automation.domain.exceptions import (
    InvalidActionConfigError,
    NetworkTimeoutError,
    OutboundRequestError,
)
from tests.fakes import ORG_ID, START, FakeClock

TIMEOUTS = {"default_timeout_seconds": 10.0, "max_timeout_seconds": 30.0}


def _context(**payload) -> ActionContext:
    return ActionContext(
        organization_id=ORG_ID,
        entity_type="poam_item",
        entity_id="item-1",
        payload=payload,
    )


def _client(handler) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(record)), seen


async def test_webhook_posts_payload_with_timestamp() -> None:
    client, seen = _client(lambda r: httpx.Response(201))
    handler = WebhookHandler(client, clock=FakeClock(), **TIMEOUTS)

    result = await handler.execute(
        _context(newStatus="closed"),
        {
            "webhookUrl": "https://hooks.example.com/poam",
            "webhookHeaders": {"X-Token": "abc"},
            "webhookBody": {"source": "poam"},
        },
    )

    [request] = seen
    assert request.method == "POST"
    assert request.headers["X-Token"] == "abc"
    assert json.loads(request.content) == {
        "source": "poam",
        "triggerData": {"newStatus": "closed"},
        "timestamp": START.isoformat(),
    }
    assert result == {"status": 201, "status_text": "Created", "success": True}


async def test_webhook_get_sends_no_body() -> None:
    client, seen = _client(lambda r: httpx.Response(200))
    handler = WebhookHandler(client, **TIMEOUTS)

    await handler.execute(
        _context(), {"webhookUrl": "https://hooks.example.com/x", "webhookMethod": "GET"}
    )

    assert seen[0].method == "GET"
    assert seen[0].content == b""


async def test_webhook_non_2xx_fails() -> None:
    client, _ = _client(lambda r: httpx.Response(503))
    handler = WebhookHandler(client, **TIMEOUTS)

    with pytest.raises(OutboundRequestError) as exc_info:
        await handler.execute(_context(), {"webhookUrl": "https://hooks.example.com/x"})

    assert exc_info.value.details["status_code"] == 503
    assert "HTTP 503" in exc_info.value.message


async def test_webhook_timeout_becomes_network_timeout() -> None:
    def hang(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = _client(hang)
    handler = WebhookHandler(client, **TIMEOUTS)

    with pytest.raises(NetworkTimeoutError) as exc_info:
        await handler.execute(
            _context(), {"webhookUrl": "https://hooks.example.com/x", "timeoutSeconds": 120}
        )

    assert exc_info.value.details["timeout_seconds"] == 30.0


async def test_unencodable_payload_becomes_outbound_error() -> None:
    client, sent = _client(lambda request: httpx.Response(200))
    handler = WebhookHandler(client, **TIMEOUTS)

    with pytest.raises(OutboundRequestError, match="not JSON serializable") as exc_info:
        await handler.execute(
            _context(dueDate=START), {"webhookUrl": "https://hooks.example.com/x"}
        )

    assert exc_info.value.details["target"] == "https://hooks.example.com"
    assert sent == []


def test_chat_handler_must_build_a_card() -> None:
    class CardlessHandler(_ChatNotificationHandler):
        action_type = ActionType.SLACK_NOTIFICATION

    client, _ = _client(lambda request: httpx.Response(200))
    with pytest.raises(TypeError, match="build_card"):
        CardlessHandler(client, **TIMEOUTS)


@pytest.mark.parametrize(
    "config",
    [
        {},
        {"webhookUrl": "ftp://files.example.com"},
        {"webhookUrl": "https://x.example.com", "webhookMethod": "DELETE"},
        {"webhookUrl": "https://x.example.com", "timeoutSeconds": 0},
    ],
)
async def test_webhook_rejects_invalid_config(config: dict) -> None:
    client, seen = _client(lambda r: httpx.Response(200))
    with pytest.raises(InvalidActionConfigError):
        await WebhookHandler(client, **TIMEOUTS).execute(_context(), config)
    assert seen == []


async def test_slack_card_has_text_entity_field_and_channel() -> None:
    client, seen = _client(lambda r: httpx.Response(200, text="ok"))
    handler = SlackNotificationHandler(client, **TIMEOUTS)

    result = await handler.execute(
        _context(entityName="Weak TLS"),
        {
            "webhookUrl": "https://hooks.slack.com/services/T/B/secret",
            "message": "{{entityName}} changed",
            "channelId": "#compliance",
        },
    )

    card = json.loads(seen[0].content)
    assert card["text"] == "Weak TLS changed"
    assert card["channel"] == "#compliance"
    assert card["attachments"][0]["fields"][0]["value"] == "poam_item: Weak TLS"
    assert result == {"status": 200, "success": True}


async def test_teams_card_is_message_card() -> None:
    client, seen = _client(lambda r: httpx.Response(200))
    handler = TeamsNotificationHandler(client, **TIMEOUTS)

    await handler.execute(
        _context(), {"webhookUrl": "https://outlook.office.com/webhook/abc", "title": "Heads up"}
    )

    card = json.loads(seen[0].content)
    assert card["@type"] == "MessageCard"
    assert card["themeColor"] == "0078D4"
    section = card["sections"][0]
    assert section["activityTitle"] == "Heads up"
    assert section["activitySubtitle"] == "Workflow notification"
    assert section["facts"] == [{"name": "Entity", "value": "poam_item: item-1"}]


async def test_chat_error_message_hides_webhook_path() -> None:
    client, _ = _client(lambda r: httpx.Response(404))
    handler = SlackNotificationHandler(client, **TIMEOUTS)

    with pytest.raises(OutboundRequestError) as exc_info:
        await handler.execute(
            _context(), {"webhookUrl": "https://hooks.slack.com/services/T/B/secret"}
        )

    assert "secret" not in exc_info.value.message
    assert exc_info.value.details["target"] == "https://hooks.slack.com"


def test_redact_url_handles_garbage() -> None:
    assert redact_url("not a url") == "<invalid url>"
