"""Application services: condition evaluation, interpolation, execution recording."""

from poam_automation.application.services.condition_evaluator import (
    evaluate_condition,
    evaluate_conditions,
)
from poam_automation.application.services.execution_recorder import ExecutionRecorder
from poam_automation.application.services.message_interpolator import interpolate

__all__ = [
    "ExecutionRecorder",
    "evaluate_condition",
    "evaluate_conditions",
    "interpolate",
]
