"""Async database engine and session factory.

Provides PostgreSQL async connectivity using SQLAlchemy 2.0 asyncio
extension with asyncpg driver. The engine and session factory are created
by the application lifespan and passed to repositories explicitly.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from solar.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async database engine from settings."""
    connect_args: dict[str, Any] = {}
    if settings.db_command_timeout is not None:
        connect_args["command_timeout"] = settings.db_command_timeout

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,  # Verify connection health
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_context(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations.

    Usage:
        async with session_context(factory) as session:
            result = await session.execute(...)
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if they do not exist."""
    from solar.persistence.tables import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def health_check(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Check database connectivity."""
    try:
        async with session_context(session_factory) as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
