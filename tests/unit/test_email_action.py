"""Tests for the send_email handler and the Jinja template renderer."""

import pytest

from poam_automation.application.actions import ActionContext, SendEmailHandler
from poam_automation.domain.exceptions import EmailTemplateNotFoundError
from poam_automation.infrastructure.services.email_template_renderer import (
    EmailTemplateRenderer,
)
from tests.fakes import ORG_ID, FakeRecipientResolver, RecordingMailGateway


def _context(**payload) -> ActionContext:
    return ActionContext(
        organization_id=ORG_ID,
        entity_type="poam_item",
        entity_id="item-1",
        payload=payload,
    )


def _handler(mail: RecordingMailGateway, resolver: FakeRecipientResolver | None = None):
    return SendEmailHandler(mail, resolver or FakeRecipientResolver(), EmailTemplateRenderer())


async def test_sends_to_explicit_ids_and_roles() -> None:
    mail = RecordingMailGateway()
    resolver = FakeRecipientResolver(
        roles={"isso": ["u2"]},
        emails={"u1": "a@example.com", "u2": "b@example.com"},
    )

    result = await _handler(mail, resolver).execute(
        _context(entityName="Weak TLS"),
        {
            "recipientEmails": ["ext@example.com", "a@example.com"],
            "recipientIds": ["u1"],
            "recipientRoles": ["isso"],
            "emailSubject": "Alert: {{entityName}}",
        },
    )

    [(to, subject, body)] = mail.sent
    assert to == ["ext@example.com", "a@example.com", "b@example.com"]
    assert subject == "Alert: Weak TLS"
    assert body == "A workflow was triggered"
    assert result["status"] == "sent"
    assert result["recipient_count"] == 3


async def test_no_recipients_is_skipped_without_sending() -> None:
    mail = RecordingMailGateway()
    result = await _handler(mail).execute(_context(), {"recipientIds": ["unknown"]})
    assert result == {"status": "skipped", "recipient_count": 0}
    assert mail.sent == []


async def test_named_template_renders_subject_and_body() -> None:
    mail = RecordingMailGateway()
    await _handler(mail).execute(
        _context(entityName="Weak TLS", oldStatus="open", newStatus="closed"),
        {"recipientEmails": ["a@example.com"], "emailTemplate": "status_change"},
    )
    [(_, subject, body)] = mail.sent
    assert subject == "Weak TLS moved to closed"
    assert "from open to closed" in body
    assert body.startswith("The status of poam_item Weak TLS")


async def test_unknown_template_fails() -> None:
    with pytest.raises(EmailTemplateNotFoundError):
        await _handler(RecordingMailGateway()).execute(
            _context(), {"recipientEmails": ["a@example.com"], "emailTemplate": "nope"}
        )


def test_renderer_accepts_custom_templates() -> None:
    renderer = EmailTemplateRenderer({"t": ("Hi {{ payload.name }}", "{{ entity_id }}")})
    assert renderer.render("t", {"name": "Ann"}, {"entity_id": "e1"}) == ("Hi Ann", "e1")
