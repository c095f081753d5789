"""Identifier generation for persisted rows (CUID2)."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant CUID2 string.

    Used as the primary key for definitions, executions, notifications,
    tasks and queued resumptions.
    """
    value = _cuid()
    if not isinstance(value, str):
        raise TypeError(f"cuid2 returned {type(value).__name__}, expected str")
    return value
