"""Engine composition root.

Builds the dispatcher, the delayed-action worker and the cancellation
service from infrastructure implementations. Callers own the session
factory, the HTTP client and the Redis client (and close them).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import httpx
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from poam_automation.application.interfaces import IMailGateway, IResumptionQueue
from poam_automation.application.services.execution_recorder import ExecutionRecorder
from poam_automation.application.use_cases.workflows import (
    ActionChainExecutor,
    ResumeDelayedActionsUseCase,
    WorkflowCancellationService,
    WorkflowDispatcher,
    WorkflowTriggers,
)
from poam_automation.core.config import Settings
from poam_automation.domain.exceptions import ConfigurationException
from poam_automation.infrastructure.external.mail import HttpMailGateway, LogOnlyMailGateway
from poam_automation.infrastructure.persistence.repositories import (
    EntityRepository,
    NotificationRepository,
    SqlResumptionQueue,
    WorkflowDefinitionRepository,
    WorkflowExecutionRepository,
)
from poam_automation.infrastructure.scheduling import RedisResumptionQueue
from poam_automation.infrastructure.services import (
    EmailTemplateRenderer,
    WorkflowRecipientResolver,
)
from poam_automation.shared.telemetry.logging import get_logger
from poam_automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkflowEngineComponents:
    """Wired engine: entry points for collaborators and the worker."""

    dispatcher: WorkflowDispatcher
    triggers: WorkflowTriggers
    resume_worker: ResumeDelayedActionsUseCase
    cancellation: WorkflowCancellationService
    registry: ActionHandlerRegistry


def build_mail_gateway(settings: Settings, http_client: httpx.AsyncClient) -> IMailGateway:
    """Return the mail gateway selected by settings.mail_backend."""
    if settings.mail_backend == "http":
        if not settings.mail_gateway_url:
            raise ConfigurationException("mail_gateway_url is required for mail_backend 'http'")
        return HttpMailGateway(
            http_client,
            settings.mail_gateway_url,
            from_address=settings.mail_from_address,
            api_key=(
                settings.mail_gateway_api_key.get_secret_value()
                if settings.mail_gateway_api_key
                else None
            ),
            timeout_seconds=settings.outbound_timeout_seconds,
        )
    return LogOnlyMailGateway()


def build_resumption_queue(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: redis.Redis | None = None,
) -> IResumptionQueue:
    """Return the resumption queue selected by settings.scheduler_backend."""
    if settings.scheduler_backend == "redis":
        if redis_client is None:
            raise ConfigurationException("scheduler_backend 'redis' requires a Redis client")
        return RedisResumptionQueue(redis_client, settings.redis_key_prefix)
    return SqlResumptionQueue(session_factory)


def build_workflow_engine(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
    redis_client: redis.Redis | None = None,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> WorkflowEngineComponents:
    """Wire repositories, gateways, handlers and use cases.

    Raises:
        ConfigurationException: A backend is selected without its dependency,
            or an action type has no handler.
    """
    definition_repo = WorkflowDefinitionRepository(session_factory)
    execution_repo = WorkflowExecutionRepository(session_factory)
    entity_repo = EntityRepository(session_factory)
    notification_repo = NotificationRepository(session_factory)
    recipient_resolver = WorkflowRecipientResolver(session_factory)
    resumption_queue = build_resumption_queue(settings, session_factory, redis_client)

    outbound = {
        "default_timeout_seconds": settings.outbound_timeout_seconds,
        "max_timeout_seconds": settings.outbound_timeout_max_seconds,
    }
    registry = ActionHandlerRegistry(
        [
            SendNotificationHandler(notification_repo, recipient_resolver),
            SendEmailHandler(
                build_mail_gateway(settings, http_client),
                recipient_resolver,
                EmailTemplateRenderer(),
            ),
            CreateTaskHandler(entity_repo),
            UpdateStatusHandler(entity_repo),
            AssignUserHandler(entity_repo),
            EscalateHandler(notification_repo),
            CreateReminderHandler(
                notification_repo,
                entity_repo,
                default_offset_hours=settings.reminder_default_offset_hours,
                clock=clock,
            ),
            WebhookHandler(http_client, clock=clock, **outbound),
            SlackNotificationHandler(http_client, **outbound),
            TeamsNotificationHandler(http_client, **outbound),
        ]
    )

    recorder = ExecutionRecorder(execution_repo, clock=clock)
    executor = ActionChainExecutor(recorder, registry, resumption_queue, clock=clock)
    dispatcher = WorkflowDispatcher(
        definition_repo,
        executor,
        max_concurrent_runs=settings.workflow_max_concurrent_runs,
    )
    logger.info(
        "Workflow engine built (scheduler_backend=%s, mail_backend=%s, max_concurrent_runs=%d)",
        settings.scheduler_backend,
        settings.mail_backend,
        settings.workflow_max_concurrent_runs,
    )
    return WorkflowEngineComponents(
        dispatcher=dispatcher,
        triggers=WorkflowTriggers(dispatcher, clock=clock),
        resume_worker=ResumeDelayedActionsUseCase(
            resumption_queue,
            definition_repo,
            entity_repo,
            recorder,
            executor,
            batch_size=settings.scheduler_batch_size,
            claim_timeout_seconds=settings.scheduler_claim_timeout_seconds,
            clock=clock,
        ),
        cancellation=WorkflowCancellationService(resumption_queue, recorder),
        registry=registry,
    )
