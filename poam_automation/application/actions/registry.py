"""Action handler registry."""

from __future__ import annotations

from collections.abc import Iterable

from poam_automation.application.actions.base import ActionHandler
from poam_automation.domain.enums import ActionType
from poam_automation.domain.exceptions import ConfigurationException


class ActionHandlerRegistry:
    """Maps every ActionType to exactly one handler.

    Construction fails when a member has no handler or two handlers claim
    the same type, so a dispatch can never hit a missing handler.
    """

    def __init__(self, handlers: Iterable[ActionHandler]) -> None:
        self._handlers: dict[ActionType, ActionHandler] = {}
        for handler in handlers:
            action_type = handler.action_type
            if action_type in self._handlers:
                raise ConfigurationException(
                    f"Duplicate handler for action type {action_type.value}"
                )
            self._handlers[action_type] = handler

        missing = [t.value for t in ActionType if t not in self._handlers]
        if missing:
            raise ConfigurationException(
                f"No handler registered for action type(s): {', '.join(missing)}"
            )

    def get(self, action_type: ActionType) -> ActionHandler:
        return self._handlers[action_type]

    def __contains__(self, action_type: object) -> bool:
        return action_type in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
