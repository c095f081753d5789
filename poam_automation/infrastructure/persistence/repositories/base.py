"""Base repository: session-per-operation transactions and error translation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from poam_automation.domain.exceptions import PersistenceError
from poam_automation.infrastructure.persistence.database import Base


def _describe(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    text = str(orig) if orig is not None else str(exc)
    return f"{type(exc).__name__}: {text.splitlines()[0] if text else 'no detail'}"


class BaseRepository[ModelType: Base]:
    """Base repository over a session factory.

    Each public operation opens its own session and transaction via
    _transaction(); SQLAlchemyError is raised as PersistenceError naming
    the operation.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[ModelType],
    ) -> None:
        self._session_factory = session_factory
        self.model = model

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction; commit on success, roll back on error."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            raise PersistenceError(operation, _describe(e)) from e

    async def _get_row(self, session: AsyncSession, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await session.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()
