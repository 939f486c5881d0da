from collections.abc import AsyncGenerator, Callable

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from starlette.requests import Request

from teapot.config import settings
from teapot.pipeline.context import has_failed

# Predictable constraint names so Alembic autogenerate stays stable.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for the tea store tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# One engine (and pool) per process; it is the only object shared between requests.
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=settings.db_pool_pre_ping,
    echo=settings.db_echo,
    connect_args={"command_timeout": settings.db_statement_timeout},
)

# expire_on_commit=False: attribute access after commit must not trigger sync I/O.
async_session = async_sessionmaker(engine, expire_on_commit=False)

SessionDependency = Callable[[Request], AsyncGenerator[AsyncSession, None]]


def session_dependency(factory: async_sessionmaker[AsyncSession]) -> SessionDependency:
    """Build a FastAPI dependency yielding one session per request from ``factory``.

    The dependency is the only place transactions end; repositories never
    commit or roll back themselves. Route pipelines answer faults with an
    error response instead of raising, so besides exceptions the request's
    failed flag (set by the Recover stage) and a session whose transaction
    was already broken by a failed flush also end in a rollback.
    """

    async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            if has_failed(request) or not session.is_active:
                await session.rollback()
            else:
                await session.commit()

    return get_session


get_db = session_dependency(async_session)


async def shutdown() -> None:
    """Close every pooled connection; called from the app lifespan."""
    await engine.dispose()
