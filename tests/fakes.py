"""In-memory implementations of the engine ports for unit tests."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from poam_automation.application.actions import (
    ActionHandlerRegistry,
    AssignUserHandler,
    CreateReminderHandler,
    CreateTaskHandler,
    EscalateHandler,
    SendEmailHandler,
    SendNotificationHandler,
    SlackNotificationHandler,
    TeamsNotificationHandler,
    UpdateStatusHandler,
    WebhookHandler,
)
from poam_automation.application.dtos.notification import (
    NotificationCreate,
    NotificationResult,
)
from poam_automation.application.dtos.task import TaskCreate, TaskResult
from poam_automation.application.dtos.workflow import WorkflowResumption
from poam_automation.application.services.execution_recorder import ExecutionRecorder
from poam_automation.application.use_cases.workflows import (
    ActionChainExecutor,
    ResumeDelayedActionsUseCase,
    WorkflowCancellationService,
    WorkflowDispatcher,
)
from poam_automation.domain.entities.workflow import (
    ActionConfig,
    Condition,
    WorkflowDefinitionEntity,
    WorkflowExecutionEntity,
)
from poam_automation.domain.exceptions import PersistenceError
from poam_automation.infrastructure.services.email_template_renderer import (
    EmailTemplateRenderer,
)

ORG_ID = "org-1"
START = datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


def make_definition(
    actions: list[dict[str, Any]],
    *,
    definition_id: str = "wf-1",
    organization_id: str = ORG_ID,
    trigger_type: str = "status_change",
    conditions: list[dict[str, Any]] | None = None,
    is_active: bool = True,
    execution_order: int = 0,
) -> WorkflowDefinitionEntity:
    return WorkflowDefinitionEntity(
        id=definition_id,
        organization_id=organization_id,
        name=f"Workflow {definition_id}",
        trigger_type=trigger_type,
        trigger_conditions=[Condition.from_dict(c) for c in conditions or []],
        actions=[ActionConfig.from_dict(a) for a in actions],
        is_active=is_active,
        execution_order=execution_order,
    )


class InMemoryDefinitionRepository:
    def __init__(self, definitions: list[WorkflowDefinitionEntity] | None = None) -> None:
        self.definitions = list(definitions or [])
        self.fail = False

    async def get_active_by_trigger(
        self, organization_id: str, trigger_type: str
    ) -> list[WorkflowDefinitionEntity]:
        if self.fail:
            raise PersistenceError("load_workflow_definitions", "database unavailable")
        matches = [
            d
            for d in self.definitions
            if d.organization_id == organization_id
            and d.trigger_type == trigger_type
            and d.is_active
        ]
        return sorted(matches, key=lambda d: d.execution_order)

    async def get_by_id(
        self, organization_id: str, definition_id: str
    ) -> WorkflowDefinitionEntity | None:
        for d in self.definitions:
            if d.id == definition_id and d.organization_id == organization_id:
                return d
        return None


class InMemoryExecutionRepository:
    """Stores deep copies so tests see only what was explicitly saved."""

    def __init__(self) -> None:
        self.rows: dict[str, WorkflowExecutionEntity] = {}
        self.fail_saves_for: set[str] = set()

    async def insert(self, execution: WorkflowExecutionEntity) -> None:
        self.rows[execution.id] = copy.deepcopy(execution)

    async def save(self, execution: WorkflowExecutionEntity) -> None:
        if execution.workflow_definition_id in self.fail_saves_for:
            raise PersistenceError("save_execution", "disk full")
        self.rows[execution.id] = copy.deepcopy(execution)

    async def get_by_id(self, execution_id: str) -> WorkflowExecutionEntity | None:
        row = self.rows.get(execution_id)
        return copy.deepcopy(row) if row is not None else None

    def for_definition(self, definition_id: str) -> list[WorkflowExecutionEntity]:
        return [r for r in self.rows.values() if r.workflow_definition_id == definition_id]


@dataclass
class StoredEntity:
    status: str = "open"
    assignee_id: str | None = None
    milestone_id: str | None = None


class InMemoryEntityRepository:
    def __init__(self) -> None:
        self.entities: dict[tuple[str, str], StoredEntity] = {}
        self.workflow_milestones: dict[str, str] = {}
        self.tasks: list[TaskResult] = []

    def add(self, entity_type: str, entity_id: str, **fields: Any) -> StoredEntity:
        entity = StoredEntity(**fields)
        self.entities[(entity_type, entity_id)] = entity
        return entity

    async def exists(self, entity_type: str, entity_id: str) -> bool:
        return (entity_type, entity_id) in self.entities

    async def update_status(self, entity_type: str, entity_id: str, status: str) -> bool:
        entity = self.entities.get((entity_type, entity_id))
        if entity is None:
            return False
        entity.status = status
        return True

    async def assign(self, entity_type: str, entity_id: str, user_id: str) -> bool:
        entity = self.entities.get((entity_type, entity_id))
        if entity is None:
            return False
        entity.assignee_id = user_id
        return True

    async def get_assignee_id(self, entity_type: str, entity_id: str) -> str | None:
        entity = self.entities.get((entity_type, entity_id))
        return entity.assignee_id if entity else None

    async def get_or_create_workflow_milestone(
        self, organization_id: str, poam_item_id: str
    ) -> str:
        if poam_item_id not in self.workflow_milestones:
            milestone_id = f"ms-workflow-{poam_item_id}"
            self.workflow_milestones[poam_item_id] = milestone_id
            self.add("milestone", milestone_id)
        return self.workflow_milestones[poam_item_id]

    async def get_task_milestone_id(self, task_id: str) -> str | None:
        entity = self.entities.get(("task", task_id))
        return entity.milestone_id if entity else None

    async def create_task(self, data: TaskCreate) -> TaskResult:
        task = TaskResult(
            id=f"task-{len(self.tasks) + 1}",
            organization_id=data.organization_id,
            milestone_id=data.milestone_id,
            name=data.name,
            description=data.description,
            assignee_id=data.assignee_id,
            planned_end_date=data.planned_end_date,
            status="not_started",
            priority=data.priority,
        )
        self.tasks.append(task)
        return task


class InMemoryNotificationRepository:
    def __init__(self) -> None:
        self.created: list[NotificationResult] = []
        self.fail = False

    async def create_many(
        self, notifications: list[NotificationCreate]
    ) -> list[NotificationResult]:
        if self.fail:
            raise PersistenceError("create_notifications", "database unavailable")
        results = []
        for n in notifications:
            result = NotificationResult(
                id=f"n-{len(self.created) + 1}",
                organization_id=n.organization_id,
                recipient_id=n.recipient_id,
                type=n.type.value,
                title=n.title,
                message=n.message,
                priority=n.priority.value,
                entity_type=n.entity_type,
                entity_id=n.entity_id,
                scheduled_for=n.scheduled_for,
                data=dict(n.data),
            )
            self.created.append(result)
            results.append(result)
        return results


class InMemoryResumptionQueue:
    def __init__(self) -> None:
        self.scheduled: dict[str, WorkflowResumption] = {}
        self.claimed: dict[str, WorkflowResumption] = {}
        self.claimed_at: dict[str, datetime] = {}

    async def schedule(self, resumption: WorkflowResumption) -> None:
        self.scheduled[resumption.id] = resumption

    async def claim_due(self, now: datetime, limit: int) -> list[WorkflowResumption]:
        due = sorted(
            (r for r in self.scheduled.values() if r.fire_at <= now),
            key=lambda r: r.fire_at,
        )[:limit]
        for r in due:
            self.claimed[r.id] = self.scheduled.pop(r.id)
            self.claimed_at[r.id] = now
        return due

    async def release(self, resumption_id: str) -> None:
        self.claimed.pop(resumption_id, None)
        self.claimed_at.pop(resumption_id, None)

    async def reclaim_stale(self, claimed_before: datetime) -> list[WorkflowResumption]:
        stale = [rid for rid, at in self.claimed_at.items() if at < claimed_before]
        for rid in stale:
            del self.claimed_at[rid]
            self.scheduled[rid] = self.claimed.pop(rid)
        return [self.scheduled[rid] for rid in stale]

    async def cancel_for_definition(
        self, organization_id: str, definition_id: str
    ) -> list[WorkflowResumption]:
        return self._remove(
            lambda r: r.organization_id == organization_id
            and r.workflow_definition_id == definition_id
        )

    async def cancel_for_entity(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> list[WorkflowResumption]:
        return self._remove(
            lambda r: r.organization_id == organization_id
            and r.entity_type == entity_type
            and r.entity_id == entity_id
        )

    def _remove(self, predicate) -> list[WorkflowResumption]:
        removed = [r for r in self.scheduled.values() if predicate(r)]
        for r in removed:
            del self.scheduled[r.id]
        return removed


class FakeRecipientResolver:
    def __init__(
        self,
        roles: dict[str, list[str]] | None = None,
        emails: dict[str, str] | None = None,
    ) -> None:
        self.roles = roles or {}
        self.emails = emails or {}

    async def get_user_ids_for_roles(
        self, organization_id: str, roles: list[str]
    ) -> list[str]:
        found: list[str] = []
        for role in roles:
            for user_id in self.roles.get(role, []):
                if user_id not in found:
                    found.append(user_id)
        return found

    async def get_emails_for_users(
        self, organization_id: str, user_ids: list[str]
    ) -> list[str]:
        return [self.emails[u] for u in user_ids if u in self.emails]


class RecordingMailGateway:
    def __init__(self) -> None:
        self.sent: list[tuple[list[str], str, str]] = []

    async def send(self, to_emails: list[str], subject: str, body: str) -> dict[str, Any]:
        self.sent.append((list(to_emails), subject, body))
        return {"backend": "memory", "message_id": f"m-{len(self.sent)}"}


def ok_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))


@dataclass
class Engine:
    """Engine wired entirely on in-memory fakes."""

    clock: FakeClock
    definitions: InMemoryDefinitionRepository
    executions: InMemoryExecutionRepository
    entities: InMemoryEntityRepository
    notifications: InMemoryNotificationRepository
    queue: InMemoryResumptionQueue
    resolver: FakeRecipientResolver
    mail: RecordingMailGateway
    recorder: ExecutionRecorder
    registry: ActionHandlerRegistry
    executor: ActionChainExecutor
    dispatcher: WorkflowDispatcher
    worker: ResumeDelayedActionsUseCase
    cancellation: WorkflowCancellationService
    http_requests: list[httpx.Request] = field(default_factory=list)


def build_engine(
    definitions: list[WorkflowDefinitionEntity] | None = None,
    *,
    resolver: FakeRecipientResolver | None = None,
    http_handler=None,
    max_concurrent_runs: int = 4,
) -> Engine:
    clock = FakeClock()
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if http_handler is not None:
            return http_handler(request)
        return httpx.Response(200, json={"ok": True})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(record))
    definition_repo = InMemoryDefinitionRepository(definitions)
    executions = InMemoryExecutionRepository()
    entities = InMemoryEntityRepository()
    notifications = InMemoryNotificationRepository()
    queue = InMemoryResumptionQueue()
    resolver = resolver or FakeRecipientResolver()
    mail = RecordingMailGateway()
    outbound = {"default_timeout_seconds": 10.0, "max_timeout_seconds": 60.0}

    registry = ActionHandlerRegistry(
        [
            SendNotificationHandler(notifications, resolver),
            SendEmailHandler(mail, resolver, EmailTemplateRenderer()),
            CreateTaskHandler(entities),
            UpdateStatusHandler(entities),
            AssignUserHandler(entities),
            EscalateHandler(notifications),
            CreateReminderHandler(notifications, entities, clock=clock),
            WebhookHandler(http_client, clock=clock, **outbound),
            SlackNotificationHandler(http_client, **outbound),
            TeamsNotificationHandler(http_client, **outbound),
        ]
    )
    recorder = ExecutionRecorder(executions, clock=clock)
    executor = ActionChainExecutor(recorder, registry, queue, clock=clock)
    dispatcher = WorkflowDispatcher(
        definition_repo, executor, max_concurrent_runs=max_concurrent_runs
    )
    worker = ResumeDelayedActionsUseCase(
        queue, definition_repo, entities, recorder, executor, clock=clock
    )
    return Engine(
        clock=clock,
        definitions=definition_repo,
        executions=executions,
        entities=entities,
        notifications=notifications,
        queue=queue,
        resolver=resolver,
        mail=mail,
        recorder=recorder,
        registry=registry,
        executor=executor,
        dispatcher=dispatcher,
        worker=worker,
        cancellation=WorkflowCancellationService(queue, recorder),
        http_requests=requests,
    )
