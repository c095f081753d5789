"""Substitutes {{path.to.field}} placeholders from the trigger payload.

Only for human-readable text (notification, email and chat messages).
A placeholder whose path does not resolve is left as-is.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from poam_automation.shared.utils.payload import MISSING, resolve_path, stringify

PLACEHOLDER_RE = re.compile(r"\{\{(\w+(?:\.\w+)*)\}\}")


def interpolate(template: str, payload: Mapping[str, Any] | None) -> str:
    """Return template with every resolvable placeholder replaced by its string form."""
    data = payload or {}

    def _replace(match: re.Match[str]) -> str:
        value = resolve_path(data, match.group(1))
        if value is MISSING:
            return match.group(0)
        return stringify(value)

    return PLACEHOLDER_RE.sub(_replace, template)
