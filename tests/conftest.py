"""Shared pytest fixtures for all test suites."""

import os
import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.db.context import RequestContext
from backend.app.db.inmemory import (
    InMemoryArtifactStore,
    InMemoryBrandingRepository,
    InMemoryClientRepository,
    InMemoryDocumentHistoryRepository,
)
from backend.app.db.models import Base, User
from backend.app.documents.service import DocumentStores


@pytest.fixture
def memory_stores() -> DocumentStores:
    """Fresh in-memory stores (artifacts expire after 24h)."""
    return DocumentStores(
        clients=InMemoryClientRepository(),
        branding=InMemoryBrandingRepository(),
        history=InMemoryDocumentHistoryRepository(),
        artifacts=InMemoryArtifactStore(ttl_hours=24),
    )


@pytest.fixture
def owner_id() -> uuid.UUID:
    """User that owns the test client."""
    return uuid.uuid4()


@pytest.fixture
def admin_ctx(owner_id: uuid.UUID) -> RequestContext:
    """Admin context for the client owner."""
    return RequestContext(user_id=owner_id, is_admin=True)


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Async engine on a temp-file SQLite database with all tables created.

    A file (not :memory:) so every connection sees the same schema.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Async session bound to the temp-file SQLite engine."""
    async with AsyncSession(sqlite_engine) as session:
        yield session


@pytest_asyncio.fixture
async def sqlite_user(sqlite_session: AsyncSession) -> uuid.UUID:
    """Persisted app_user row; returns its id."""
    user_id = uuid.uuid4()
    sqlite_session.add(User(user_id=user_id, email=f"{user_id}@example.com", name="Owner"))
    await sqlite_session.commit()
    return user_id


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for PostgreSQL integration tests."""
    async with AsyncSession(postgres_engine) as session:
        yield session
        await session.rollback()
