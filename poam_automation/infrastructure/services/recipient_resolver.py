"""Workflow recipient resolver: organization roles and user emails."""

from __future__ import annotations

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.domain.exceptions import PersistenceError
from poam_automation.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_USER_IDS_FOR_ROLES = text("""
    SELECT DISTINCT m.user_id
    FROM organization_membership m
    JOIN app_user u ON u.id = m.user_id
    WHERE m.organization_id = :organization_id
      AND m.role IN :roles
      AND u.is_active = true
    ORDER BY m.user_id
""").bindparams(bindparam("roles", expanding=True))

_EMAILS_FOR_USERS = text("""
    SELECT u.id, u.email
    FROM app_user u
    JOIN organization_membership m ON m.user_id = u.id
    WHERE m.organization_id = :organization_id
      AND u.id IN :user_ids
      AND u.is_active = true
""").bindparams(bindparam("user_ids", expanding=True))


class WorkflowRecipientResolver:
    """Resolves workflow recipients by organization membership. Implements IRecipientResolver.

    Users outside the organization or inactive are never returned.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_user_ids_for_roles(
        self, organization_id: str, roles: list[str]
    ) -> list[str]:
        """Return distinct user ids with any of the roles in the organization."""
        if not roles:
            return []
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    _USER_IDS_FOR_ROLES,
                    {"organization_id": organization_id, "roles": list(roles)},
                )
                return [row[0] for row in result.fetchall() if row[0]]
        except SQLAlchemyError as e:
            raise PersistenceError("resolve_role_recipients", str(e)) from e

    async def get_emails_for_users(
        self, organization_id: str, user_ids: list[str]
    ) -> list[str]:
        """Return emails of active organization members among user_ids, in input order."""
        if not user_ids:
            return []
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    _EMAILS_FOR_USERS,
                    {"organization_id": organization_id, "user_ids": list(user_ids)},
                )
                by_id = {row[0]: row[1] for row in result.fetchall() if row[1]}
        except SQLAlchemyError as e:
            raise PersistenceError("resolve_recipient_emails", str(e)) from e
        unknown = [uid for uid in user_ids if uid not in by_id]
        if unknown:
            logger.debug(
                "No active member email for %d user(s) in organization %s",
                len(unknown),
                organization_id,
            )
        return [by_id[uid] for uid in user_ids if uid in by_id]
