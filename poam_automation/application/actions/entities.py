"""Entity actions: create_task, update_status, assign_user.

The entity types these actions may touch are listed explicitly; any
other type is a handler failure rather than a silent no-op.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import Field

from poam_automation.application.actions.base import (
    ActionConfigModel,
    ActionContext,
    ActionHandler,
)
from poam_automation.application.dtos.task import TaskCreate
from poam_automation.application.services.message_interpolator import interpolate
from poam_automation.domain.enums import ActionType, EntityType, NotificationPriority
from poam_automation.domain.exceptions import (
    EntityNotFoundError,
    UnsupportedEntityTypeError,
)
from poam_automation.shared.utils.datetime import ensure_utc

if TYPE_CHECKING:
    from poam_automation.application.interfaces.repositories import IEntityRepository


def _require_mutable(operation: str, entity_type: str) -> EntityType:
    try:
        parsed = EntityType(entity_type)
    except ValueError:
        raise UnsupportedEntityTypeError(operation, entity_type) from None
    if parsed not in EntityType.mutable():
        raise UnsupportedEntityTypeError(operation, entity_type)
    return parsed


class CreateTaskConfig(ActionConfigModel):
    task_name: str = "Workflow Task"
    task_description: str = "Task created by workflow"
    assignee_id: str | None = None
    due_date: datetime | None = None
    priority: NotificationPriority = NotificationPriority.MEDIUM


class CreateTaskHandler(ActionHandler[CreateTaskConfig]):
    """Follow-up task under the triggering entity's milestone.

    poam_item: the item's "Workflow Tasks" milestone (created on first use).
    milestone: the milestone itself. task: the task's own milestone.
    """

    action_type = ActionType.CREATE_TASK
    config_model = CreateTaskConfig

    def __init__(self, entity_repo: IEntityRepository) -> None:
        self._entities = entity_repo

    async def _resolve_milestone(self, context: ActionContext) -> str:
        try:
            entity_type = EntityType(context.entity_type)
        except ValueError:
            raise UnsupportedEntityTypeError("create_task", context.entity_type) from None

        if entity_type is EntityType.POAM_ITEM:
            if not await self._entities.exists(entity_type.value, context.entity_id):
                raise EntityNotFoundError(entity_type.value, context.entity_id)
            return await self._entities.get_or_create_workflow_milestone(
                context.organization_id, context.entity_id
            )
        if entity_type is EntityType.MILESTONE:
            if not await self._entities.exists(entity_type.value, context.entity_id):
                raise EntityNotFoundError(entity_type.value, context.entity_id)
            return context.entity_id
        if entity_type is EntityType.TASK:
            milestone_id = await self._entities.get_task_milestone_id(context.entity_id)
            if milestone_id is None:
                raise EntityNotFoundError(entity_type.value, context.entity_id)
            return milestone_id
        raise UnsupportedEntityTypeError("create_task", context.entity_type)

    async def handle(self, context: ActionContext, config: CreateTaskConfig) -> dict[str, Any]:
        milestone_id = await self._resolve_milestone(context)
        task = await self._entities.create_task(
            TaskCreate(
                organization_id=context.organization_id,
                milestone_id=milestone_id,
                name=interpolate(config.task_name, context.payload),
                description=interpolate(config.task_description, context.payload),
                assignee_id=config.assignee_id,
                planned_end_date=ensure_utc(config.due_date),
                priority=config.priority.value,
            )
        )
        return {"task_id": task.id, "milestone_id": milestone_id}


class UpdateStatusConfig(ActionConfigModel):
    new_status: str = Field(..., min_length=1)


class UpdateStatusHandler(ActionHandler[UpdateStatusConfig]):
    """Sets the status field of the triggering entity."""

    action_type = ActionType.UPDATE_STATUS
    config_model = UpdateStatusConfig

    def __init__(self, entity_repo: IEntityRepository) -> None:
        self._entities = entity_repo

    async def handle(self, context: ActionContext, config: UpdateStatusConfig) -> dict[str, Any]:
        entity_type = _require_mutable("status update", context.entity_type)
        updated = await self._entities.update_status(
            entity_type.value, context.entity_id, config.new_status
        )
        if not updated:
            raise EntityNotFoundError(entity_type.value, context.entity_id)
        return {
            "entity_type": entity_type.value,
            "entity_id": context.entity_id,
            "new_status": config.new_status,
        }


class AssignUserConfig(ActionConfigModel):
    user_id: str = Field(..., min_length=1)


class AssignUserHandler(ActionHandler[AssignUserConfig]):
    """Sets the assignee field of the triggering entity."""

    action_type = ActionType.ASSIGN_USER
    config_model = AssignUserConfig

    def __init__(self, entity_repo: IEntityRepository) -> None:
        self._entities = entity_repo

    async def handle(self, context: ActionContext, config: AssignUserConfig) -> dict[str, Any]:
        entity_type = _require_mutable("assignment", context.entity_type)
        updated = await self._entities.assign(entity_type.value, context.entity_id, config.user_id)
        if not updated:
            raise EntityNotFoundError(entity_type.value, context.entity_id)
        return {
            "entity_type": entity_type.value,
            "entity_id": context.entity_id,
            "assignee_id": config.user_id,
        }
