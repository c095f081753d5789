"""Workflow email templates: template key → subject/body (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, Template

from poam_automation.domain.exceptions import EmailTemplateNotFoundError

# In-repo template definitions: key → (subject_template, body_template)
# Context: payload (trigger payload), entity_type, entity_id
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    "status_change": (
        "{{ payload.get('entityName', 'Item') }} moved to {{ payload.get('newStatus', 'a new status') }}",
        "The status of {{ entity_type }} {{ payload.get('entityName', entity_id) }} changed "
        "from {{ payload.get('oldStatus', 'N/A') }} to {{ payload.get('newStatus', 'N/A') }}.",
    ),
    "overdue_item": (
        "Overdue: {{ payload.get('entityName', 'Item') }}",
        "{{ entity_type }} {{ payload.get('entityName', entity_id) }} was due on "
        "{{ payload.get('dueDate', 'N/A') }} and is {{ payload.get('daysOverdue', '?') }} day(s) overdue.",
    ),
    "evidence_uploaded": (
        "New evidence uploaded",
        "Evidence {{ entity_id }} was uploaded"
        "{% if payload.get('poamItemId') %} for POA&M item {{ payload.get('poamItemId') }}{% endif %}.",
    ),
}


class EmailTemplateRenderer:
    """Renders subject and body for the send_email action from a template key."""

    def __init__(
        self,
        templates: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._env = Environment(autoescape=False)
        self._compiled: dict[str, tuple[Template, Template]] = {}
        for key, (sub_str, body_str) in self._templates.items():
            self._compiled[key] = (
                self._env.from_string(sub_str),
                self._env.from_string(body_str),
            )

    def render(
        self,
        template_key: str,
        payload: dict[str, Any],
        context: dict[str, Any] | None = None,
    ) -> tuple[str, str]:
        """Render subject and body. Raises EmailTemplateNotFoundError if key unknown."""
        if template_key not in self._compiled:
            raise EmailTemplateNotFoundError(template_key)
        ctx = {"entity_type": None, "entity_id": None, **(context or {}), "payload": payload}
        subject_tpl, body_tpl = self._compiled[template_key]
        return subject_tpl.render(**ctx), body_tpl.render(**ctx)
