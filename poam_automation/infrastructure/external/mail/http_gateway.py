"""HTTP mail gateway: JSON POST to a transactional mail API."""

from __future__ import annotations

from typing import Any

import httpx

from poam_automation.application.actions.base import ensure_success, send_request
from poam_automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class HttpMailGateway:
    """IMailGateway implementation posting {from, to, subject, text} to mail_gateway_url.

    Uses the shared httpx.AsyncClient and an explicit timeout. Timeouts raise
    NetworkTimeoutError; transport errors and non-2xx answers raise
    OutboundRequestError.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        *,
        from_address: str,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http_client
        self._url = url
        self._from = from_address
        self._api_key = api_key
        self._timeout = timeout_seconds

    async def send(
        self,
        to_emails: list[str],
        subject: str,
        body: str,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        response = await send_request(
            self._http,
            "POST",
            self._url,
            timeout_seconds=self._timeout,
            json_body={
                "from": self._from,
                "to": list(to_emails),
                "subject": subject,
                "text": body,
            },
            headers=headers,
        )
        ensure_success(response, self._url)
        message_id = None
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message_id = data.get("id") or data.get("message_id")
        logger.info(
            "Workflow email sent to %d recipients (status=%d)",
            len(to_emails),
            response.status_code,
        )
        return {"backend": "http", "status": response.status_code, "message_id": message_id}
