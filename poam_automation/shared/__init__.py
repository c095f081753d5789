"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from poam_automation.shared.enums import (
    ActionOutcomeStatus,
    NotificationType,
    ResumptionStatus,
    WorkflowExecutionStatus,
)
from poam_automation.shared.utils import (
    MISSING,
    ensure_utc,
    from_timestamp_utc,
    generate_cuid,
    parse_iso_datetime,
    resolve_path,
    stringify,
    utc_now,
)

__all__ = [
    "ActionOutcomeStatus",
    "NotificationType",
    "ResumptionStatus",
    "WorkflowExecutionStatus",
    "MISSING",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "parse_iso_datetime",
    "resolve_path",
    "stringify",
]
