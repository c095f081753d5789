"""Pytest configuration and fixtures for poam-automation.

Unit tests run the engine on the in-memory fakes in tests/fakes.py.
Repository tests use in-memory SQLite (sqlite+aiosqlite, StaticPool) so
no database server is needed.
"""

import os
from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from poam_automation.core.config import get_settings
from poam_automation.infrastructure.persistence.database import (
    Base,
    create_all,
    create_session_factory,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Settings require DATABASE_URL; tests never touch the lazily built engine.
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def sqlite_engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the in-memory engine."""
    return create_session_factory(sqlite_engine)
