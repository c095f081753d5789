"""Domain exceptions for the workflow automation engine.

Defines the error taxonomy of the engine. Condition evaluation never
raises; handler failures abort one chain; persistence failures are
surfaced to whoever called the dispatcher.
"""

from typing import Any


class PoamAutomationException(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. action_type, entity_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationException(PoamAutomationException):
    """Raised when the engine is wired incorrectly (missing handler, bad backend)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class ActionHandlerError(PoamAutomationException):
    """Raised by an action handler; aborts the remaining chain of that run.

    Subclasses narrow the cause. The chain executor records the message
    as the execution's error_message.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "ACTION_HANDLER_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class InvalidActionConfigError(ActionHandlerError):
    """Action config does not satisfy the handler's contract."""

    def __init__(self, action_type: str, reason: str) -> None:
        super().__init__(
            f"Invalid config for {action_type} action: {reason}",
            "INVALID_ACTION_CONFIG",
            {"action_type": action_type, "reason": reason},
        )


class UnknownActionTypeError(ActionHandlerError):
    """A stored action names a type the engine does not know."""

    def __init__(self, action_type: Any) -> None:
        super().__init__(
            f"Unknown action type: {action_type}",
            "UNKNOWN_ACTION_TYPE",
            {"action_type": action_type},
        )


class UnsupportedEntityTypeError(ActionHandlerError):
    """The action cannot target this entity type."""

    def __init__(self, operation: str, entity_type: str) -> None:
        super().__init__(
            f"Unsupported entity type for {operation}: {entity_type}",
            "UNSUPPORTED_ENTITY_TYPE",
            {"operation": operation, "entity_type": entity_type},
        )


class EntityNotFoundError(ActionHandlerError):
    """The entity targeted by an action does not exist."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class EmailTemplateNotFoundError(ActionHandlerError):
    """send_email referenced a template key that is not registered."""

    def __init__(self, template_key: str) -> None:
        super().__init__(
            f"Unknown email template: {template_key}",
            "EMAIL_TEMPLATE_NOT_FOUND",
            {"template_key": template_key},
        )


class OutboundRequestError(ActionHandlerError):
    """An outbound HTTP call failed or returned a non-success status."""

    def __init__(
        self,
        target: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"target": target, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Outbound request to {target} failed: {reason}",
            "OUTBOUND_REQUEST_ERROR",
            details,
        )


class NetworkTimeoutError(ActionHandlerError):
    """An outbound call exceeded its timeout budget."""

    def __init__(self, target: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Outbound request to {target} timed out after {timeout_seconds:g}s",
            "NETWORK_TIMEOUT",
            {"target": target, "timeout_seconds": timeout_seconds},
        )


class PersistenceError(PoamAutomationException):
    """Writing or reading engine state (definitions, executions, resumptions) failed."""

    def __init__(
        self,
        operation: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = {"operation": operation, "reason": reason, **(details or {})}
        super().__init__(
            f"Persistence failure during {operation}: {reason}",
            "PERSISTENCE_ERROR",
            merged,
        )


class WorkflowDispatchError(PersistenceError):
    """One or more chain runs of a dispatch could not persist their state.

    Raised after every matched workflow has had its chance to run.

    Attributes:
        errors: (workflow_definition_id, error) pairs for the failed runs;
            usually PersistenceError, or whatever else escaped the run.
        executions: Executions of the runs that persisted normally.
    """

    def __init__(
        self,
        errors: list[tuple[str, Exception]],
        executions: list[Any],
    ) -> None:
        self.errors = errors
        self.executions = executions
        super().__init__(
            "dispatch",
            f"{len(errors)} workflow run(s) could not persist execution state",
            {"workflow_definition_ids": [wid for wid, _ in errors]},
        )


class InvalidExecutionTransition(PoamAutomationException):
    """An execution was moved along an edge its state machine does not have."""

    def __init__(self, execution_id: str, current: str, target: str) -> None:
        super().__init__(
            f"Execution {execution_id} cannot move from {current} to {target}",
            "INVALID_EXECUTION_TRANSITION",
            {"execution_id": execution_id, "current": current, "target": target},
        )
