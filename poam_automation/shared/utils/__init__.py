"""Shared utilities: datetime, generators, payload paths."""

from poam_automation.shared.utils.datetime import (
    ensure_utc,
    from_timestamp_utc,
    parse_iso_datetime,
    utc_now,
)
from poam_automation.shared.utils.generators import generate_cuid
from poam_automation.shared.utils.payload import MISSING, resolve_path, stringify

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "parse_iso_datetime",
    "MISSING",
    "resolve_path",
    "stringify",
]
