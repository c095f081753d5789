"""Evaluates workflow conditions against a trigger payload.

Pure and side-effect free. A field that cannot be resolved, an operand
of the wrong kind or an unknown operator makes the condition false; no
exception ever escapes, so evaluation cannot abort a run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from poam_automation.domain.entities.workflow import Condition
from poam_automation.domain.enums import ConditionOperator
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.payload import MISSING, resolve_path, stringify

logger = get_logger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equals(left: Any, right: Any) -> bool:
    """Equality without Python's cross-type coercions (True == 1, 1 == 1.0 is kept)."""
    if left is MISSING or right is MISSING:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _contains_strict(collection: Iterable[Any], item: Any) -> bool:
    return any(_strict_equals(candidate, item) for candidate in collection)


def _as_condition(condition: Condition | Mapping[str, Any]) -> Condition:
    if isinstance(condition, Condition):
        return condition
    return Condition.from_dict(dict(condition))


def evaluate_condition(
    condition: Condition | Mapping[str, Any], payload: Mapping[str, Any] | None
) -> bool:
    """Return whether a single condition holds for payload."""
    cond = _as_condition(condition)
    field_value = resolve_path(payload or {}, cond.field)
    expected = cond.value

    try:
        operator = ConditionOperator(cond.operator)
    except ValueError:
        logger.warning(
            "Unknown condition operator %r on field %r; treating as false",
            cond.operator,
            cond.field,
        )
        return False

    if operator is ConditionOperator.EQUALS:
        return _strict_equals(field_value, expected)
    if operator is ConditionOperator.NOT_EQUALS:
        return not _strict_equals(field_value, expected)
    if operator is ConditionOperator.GREATER_THAN:
        return _is_number(field_value) and _is_number(expected) and field_value > expected
    if operator is ConditionOperator.LESS_THAN:
        return _is_number(field_value) and _is_number(expected) and field_value < expected
    if operator is ConditionOperator.CONTAINS:
        if field_value is MISSING or expected is MISSING:
            return False
        return stringify(expected) in stringify(field_value)
    if operator is ConditionOperator.IN:
        if not isinstance(expected, (list, tuple, set, frozenset)):
            return False
        return _contains_strict(expected, field_value)
    if operator is ConditionOperator.NOT_IN:
        if not isinstance(expected, (list, tuple, set, frozenset)):
            return False
        return not _contains_strict(expected, field_value)
    return False


def evaluate_conditions(
    conditions: Iterable[Condition | Mapping[str, Any]] | None,
    payload: Mapping[str, Any] | None,
) -> bool:
    """Return True when every condition holds (AND). An empty or missing list is true."""
    for condition in conditions or ():
        if not evaluate_condition(condition, payload):
            return False
    return True
