"""Database engine and session factory."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from mlm_engine.config.settings import settings
from mlm_engine.models.base import Base


def create_engine(
    database_url: str | None = None, pooled: bool = True
) -> AsyncEngine:
    """
    Create an async engine.

    Args:
        database_url: Override DATABASE_URL
        pooled: Use NullPool when False (one-off scripts)

    Returns:
        AsyncEngine
    """
    url = database_url or settings.async_database_url
    if pooled:
        return create_async_engine(url, echo=settings.database_echo)
    return create_async_engine(
        url, echo=settings.database_echo, poolclass=NullPool
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker bound to an engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
