"""Action handler contract, config validation and outbound HTTP helper.

Every handler maps (context, config) to one storage or network effect
plus a result dict that the chain executor stores verbatim in the
execution log. Handlers never call each other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from poam_automation.domain.enums import ActionType
from poam_automation.domain.exceptions import (
    InvalidActionConfigError,
    NetworkTimeoutError,
    OutboundRequestError,
)


@dataclass(frozen=True)
class ActionContext:
    """What a handler knows about the run it is part of."""

    organization_id: str
    entity_type: str
    entity_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    workflow_definition_id: str | None = None
    execution_id: str | None = None


class ActionConfigModel(BaseModel):
    """Base for per-action config models.

    Stored definitions use camelCase keys (recipientIds, webhookUrl);
    snake_case names are accepted too. Unknown keys are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _validation_reason(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


class ActionHandler[ConfigT: ActionConfigModel](ABC):
    """Base class for action handlers.

    Subclasses set action_type and config_model and implement handle().
    """

    action_type: ClassVar[ActionType]
    config_model: ClassVar[type[ActionConfigModel]]

    def parse_config(self, config: dict[str, Any] | None) -> ConfigT:
        """Validate raw config. Raises InvalidActionConfigError."""
        try:
            return self.config_model.model_validate(config or {})  # type: ignore[return-value]
        except ValidationError as e:
            raise InvalidActionConfigError(self.action_type.value, _validation_reason(e)) from e

    async def execute(self, context: ActionContext, config: dict[str, Any] | None) -> dict[str, Any]:
        """Validate config and run the handler; returns the log result."""
        parsed = self.parse_config(config)
        return await self.handle(context, parsed)

    @abstractmethod
    async def handle(self, context: ActionContext, config: ConfigT) -> dict[str, Any]:
        """Perform the side effect. Raises ActionHandlerError on failure."""


def redact_url(url: str) -> str:
    """Return scheme://host of url; chat webhook paths carry secrets."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return "<invalid url>"
    return f"{parsed.scheme}://{parsed.host}" if parsed.host else "<invalid url>"


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    timeout_seconds: float,
    json_body: Any = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Issue one outbound request with an explicit timeout.

    Raises:
        NetworkTimeoutError: No response within timeout_seconds.
        OutboundRequestError: Transport error, malformed URL or unencodable body.
    """
    target = redact_url(url)
    try:
        return await client.request(
            method,
            url,
            json=json_body,
            headers=headers,
            timeout=timeout_seconds,
        )
    except httpx.TimeoutException as e:
        raise NetworkTimeoutError(target, timeout_seconds) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise OutboundRequestError(target, str(e) or type(e).__name__) from e
    except (TypeError, ValueError) as e:
        # Raised while building the request, e.g. a body that is not JSON-serializable.
        raise OutboundRequestError(target, f"Invalid request: {e}") from e


def ensure_success(response: httpx.Response, url: str) -> None:
    """Raise OutboundRequestError unless the response status is 2xx."""
    if not response.is_success:
        raise OutboundRequestError(
            redact_url(url),
            f"HTTP {response.status_code} {response.reason_phrase}".strip(),
            status_code=response.status_code,
        )


def effective_timeout(
    requested: float | None, default_seconds: float, max_seconds: float
) -> float:
    """Per-action timeout override, bounded by the configured maximum."""
    if requested is None:
        return default_seconds
    return min(requested, max_seconds)
