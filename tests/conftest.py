"""Global pytest fixtures for the LearnHub submission engine.

This module provides shared fixtures for testing including:
- Mock sessions for unit tests
- An in-memory SQLite database for integration tests
- Principals for each platform role
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnhub.infrastructure.database.models import Base
from learnhub.infrastructure.database.session import create_session_factory, transaction
from learnhub.repositories.resilience import RetryConfig
from learnhub.shared.schemas.base import Principal, Role
from learnhub.submissions.engine import SubmissionEngine


def utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


# ===========================================
# DATABASE SESSION FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncMock, None]:
    """Create a mock async database session for unit tests.

    For integration tests, use the `session_factory` fixture instead.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()

    # Mock context manager behavior
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)

    yield session


async def _create_sqlite_engine(enforce_foreign_keys: bool = False) -> AsyncEngine:
    """In-memory SQLite engine with the full schema created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database. SQLite ignores foreign keys unless asked.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    if enforce_foreign_keys:

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = await _create_sqlite_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def fk_db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Like ``db_engine`` but with foreign-key enforcement switched on."""
    engine = await _create_sqlite_engine(enforce_foreign_keys=True)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def engine_api(session_factory) -> SubmissionEngine:
    """SubmissionEngine bound to the test database, with retries disabled."""
    return SubmissionEngine(session_factory, RetryConfig(max_retries=0, jitter=False))


@pytest_asyncio.fixture
async def fk_session_factory(fk_db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(fk_db_engine)


@pytest.fixture
def persist(session_factory):
    """Return a coroutine that commits entities in one transaction."""

    async def _persist(*entities):
        async with transaction(session_factory) as session:
            session.add_all(entities)
        return entities[0] if len(entities) == 1 else entities

    return _persist


# ===========================================
# PRINCIPALS
# ===========================================


@pytest.fixture
def student_principal() -> Principal:
    return Principal(id=uuid4(), role=Role.STUDENT)


@pytest.fixture
def mentor_principal() -> Principal:
    return Principal(id=uuid4(), role=Role.MENTOR)


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(id=uuid4(), role=Role.ADMIN)


# ===========================================
# TIME HELPERS
# ===========================================


@pytest.fixture
def future_due_date() -> datetime:
    return utcnow() + timedelta(days=7)


@pytest.fixture
def past_due_date() -> datetime:
    return utcnow() - timedelta(days=1)
