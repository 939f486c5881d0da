import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from teapot.db.session import Base, get_db, session_dependency
from teapot.dependencies import get_tea_repository
from teapot.main import app
from tests.factories import InMemoryTeaRepository

# Fixtures outside conftest.py are only seen when registered as plugins.
pytest_plugins = ["tests.seeds"]

# SQLite file by default; point TEST_DATABASE_URL at a Postgres test database to run
# the same tests against asyncpg.
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'teapot_test.db'}",
)

engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
async_session = async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def repo() -> InMemoryTeaRepository:
    return InMemoryTeaRepository()


@pytest_asyncio.fixture
async def client(repo: InMemoryTeaRepository) -> AsyncIterator[AsyncClient]:
    """HTTP client whose requests hit the in-memory repository."""
    app.dependency_overrides[get_tea_repository] = lambda: repo

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db() -> AsyncIterator[AsyncSession]:
    """Create tables and yield a session, then drop tables after test."""
    async with engine.begin() as conn:
        # A crashed earlier run may have left the SQLite file behind
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_client(db: AsyncSession) -> AsyncIterator[AsyncClient]:
    """HTTP client backed by the test database.

    Only the session factory is swapped: requests go through the real
    SqlTeaRepository and the real commit/rollback logic of the session
    dependency, each with its own session.
    """
    app.dependency_overrides[get_db] = session_dependency(async_session)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
