"""Dot-path lookup and string forms for semi-structured trigger payloads."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class _Missing:
    """Sentinel for a dot-path that does not resolve inside a payload."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def resolve_path(payload: Any, path: str) -> Any:
    """Resolve a dot-path such as ``entity.severity`` inside payload.

    Mappings are traversed by key, sequences by integer segment. Any
    segment that cannot be followed yields MISSING; this never raises.
    """
    if not path:
        return MISSING
    current = payload
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.lstrip("-").isdigit():
                return MISSING
            index = int(segment)
            if index < 0 or index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def stringify(value: Any) -> str:
    """Return the display string for a payload value.

    JSON scalars render the way they appear on the wire: None is "null",
    booleans are lower-case and integral floats drop the ".0".
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else stringify(item) for item in value)
    return str(value)
