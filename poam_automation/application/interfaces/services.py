"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators outside the engine (DIP).
"""

from __future__ import annotations

from typing import Any, Protocol


# Mail gateway interface
class IMailGateway(Protocol):
    """Protocol for sending email (log-only, HTTP mail API, ...).

    Implementations raise ActionHandlerError subclasses on delivery
    failure and NetworkTimeoutError when the gateway does not answer in time.
    """

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> dict[str, Any]:
        """Send one message to all recipients; return gateway metadata (e.g. message id)."""


# Recipient resolver interface
class IRecipientResolver(Protocol):
    """Protocol for resolving workflow recipients inside an organization."""

    async def get_user_ids_for_roles(
        self, organization_id: str, roles: list[str]
    ) -> list[str]:
        """Return distinct user ids holding any of the roles in the organization."""

    async def get_emails_for_users(
        self, organization_id: str, user_ids: list[str]
    ) -> list[str]:
        """Return email addresses of active members among user_ids."""


# Email template renderer interface
class IEmailTemplateRenderer(Protocol):
    """Protocol for named email templates (send_email emailTemplate)."""

    def render(
        self,
        template_key: str,
        payload: dict[str, Any],
        context: dict[str, Any] | None = None,
    ) -> tuple[str, str]:
        """Return (subject, body). Raises EmailTemplateNotFoundError for unknown keys."""
