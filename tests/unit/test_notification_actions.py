"""Tests for send_notification, escalate and create_reminder handlers."""

from datetime import timedelta

import pytest

from poam_automation.application.actions import (
    ActionContext,
    CreateReminderHandler,
    EscalateHandler,
    SendNotificationHandler,
)
from poam_automation.domain.exceptions import ActionHandlerError, InvalidActionConfigError
from tests.fakes import (
    ORG_ID,
    FakeClock,
    FakeRecipientResolver,
    InMemoryEntityRepository,
    InMemoryNotificationRepository,
)


def _context(**payload) -> ActionContext:
    return ActionContext(
        organization_id=ORG_ID,
        entity_type="poam_item",
        entity_id="item-1",
        payload=payload,
        workflow_definition_id="wf-1",
    )


async def test_send_notification_one_row_per_distinct_recipient() -> None:
    repo = InMemoryNotificationRepository()
    resolver = FakeRecipientResolver(roles={"isso": ["u2", "u3"]})
    handler = SendNotificationHandler(repo, resolver)

    result = await handler.execute(
        _context(entityName="Weak TLS"),
        {
            "recipientIds": ["u1", "u2"],
            "recipientRoles": ["isso"],
            "title": "Update on {{entityName}}",
            "message": "Status is {{newStatus}}",
            "priority": "high",
        },
    )

    assert result["recipient_count"] == 3
    assert [n.recipient_id for n in repo.created] == ["u1", "u2", "u3"]
    first = repo.created[0]
    assert first.title == "Update on Weak TLS"
    assert first.message == "Status is {{newStatus}}"
    assert first.priority == "high"
    assert first.type == "workflow_action"
    assert first.entity_type == "poam_item" and first.entity_id == "item-1"
    assert result["notification_ids"] == [n.id for n in repo.created]


async def test_send_notification_without_recipients_writes_nothing() -> None:
    repo = InMemoryNotificationRepository()
    handler = SendNotificationHandler(repo, FakeRecipientResolver())

    result = await handler.execute(_context(), {})

    assert result == {"recipient_count": 0, "notification_ids": []}
    assert repo.created == []


async def test_send_notification_rejects_bad_priority() -> None:
    handler = SendNotificationHandler(InMemoryNotificationRepository(), FakeRecipientResolver())
    with pytest.raises(InvalidActionConfigError) as exc_info:
        await handler.execute(_context(), {"recipientIds": ["u1"], "priority": "critical"})
    assert exc_info.value.details["action_type"] == "send_notification"


async def test_escalate_creates_urgent_notification() -> None:
    repo = InMemoryNotificationRepository()
    handler = EscalateHandler(repo)

    result = await handler.execute(
        _context(entityName="Weak TLS"), {"escalateTo": "ciso", "escalationLevel": 2}
    )

    [notification] = repo.created
    assert notification.recipient_id == "ciso"
    assert notification.priority == "urgent"
    assert notification.type == "escalation"
    assert notification.title == "Escalation: Weak TLS requires attention"
    assert notification.message == "Item has been escalated to level 2"
    assert notification.data == {"escalation_level": 2}
    assert result == {"escalated_to": "ciso", "level": 2, "notification_id": notification.id}


async def test_escalate_requires_target() -> None:
    handler = EscalateHandler(InMemoryNotificationRepository())
    with pytest.raises(InvalidActionConfigError):
        await handler.execute(_context(), {"escalationLevel": 1})


async def test_reminder_defaults_to_assignee_and_offset() -> None:
    repo = InMemoryNotificationRepository()
    entities = InMemoryEntityRepository()
    entities.add("poam_item", "item-1", assignee_id="owner-1")
    clock = FakeClock()
    handler = CreateReminderHandler(repo, entities, default_offset_hours=24, clock=clock)

    result = await handler.execute(_context(), {"message": "Check {{entityName}}"})

    [notification] = repo.created
    assert notification.recipient_id == "owner-1"
    assert notification.type == "reminder"
    assert notification.title == "Reminder: Item needs attention"
    assert notification.scheduled_for == clock() + timedelta(hours=24)
    assert result["reminder_date"] == (clock() + timedelta(hours=24)).isoformat()


async def test_reminder_falls_back_to_payload_assignee() -> None:
    repo = InMemoryNotificationRepository()
    handler = CreateReminderHandler(repo, InMemoryEntityRepository(), clock=FakeClock())

    result = await handler.execute(
        _context(assigneeId="payload-user"),
        {"reminderDate": "2026-02-01T12:00:00Z", "reminderType": "due_date"},
    )

    assert result["recipient_id"] == "payload-user"
    assert result["reminder_date"] == "2026-02-01T12:00:00+00:00"
    assert repo.created[0].data == {"reminder_type": "due_date"}


async def test_reminder_without_any_recipient_fails() -> None:
    handler = CreateReminderHandler(
        InMemoryNotificationRepository(), InMemoryEntityRepository(), clock=FakeClock()
    )
    with pytest.raises(ActionHandlerError, match="No assignee"):
        await handler.execute(_context(), {})
