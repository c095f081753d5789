"""Log-only mail gateway (no delivery)."""

from __future__ import annotations

import logging
from typing import Any

from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyMailGateway:
    """IMailGateway implementation that logs instead of sending email.

    Use when no mail API is configured. Production swaps in HttpMailGateway.
    """

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> dict[str, Any]:
        """Log the message; no actual email sent."""
        recipients = list(to_emails or [])
        subject_preview = (subject or "")[:80]
        logger.info(
            "Workflow email: would send to %d recipients (subject=%r)",
            len(recipients),
            subject_preview,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Workflow email recipients: %s (at %s)",
                recipients,
                utc_now().isoformat(),
            )
        logger.debug("Workflow email body (first 500 chars): %s", (body or "")[:500])
        return {"backend": "log", "delivered": False}
