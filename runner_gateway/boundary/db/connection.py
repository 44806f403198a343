"""
Engines and sessions for the job record store.

Two lifetimes exist:
- the API shares one cached engine per process (``get_async_engine``),
  disposed by the application lifespan;
- workers build a private engine per event loop with
  ``create_engine_from_settings`` and dispose it themselves, because pooled
  asyncpg connections are bound to the loop that opened them.

Dependencies: sqlalchemy, runner_gateway.configs
System role: Database connection lifecycle management
"""

import logging
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from runner_gateway.configs import get_settings
from runner_gateway.configs.database import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine_from_settings(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Build a new async engine; the caller owns and disposes it.

    Args:
        db_config: Database settings

    Returns:
        AsyncEngine: Fresh engine (pooled for PostgreSQL, SQLite defaults otherwise)
    """
    if db_config.is_sqlite:
        return create_async_engine(db_config.async_database_url, echo=db_config.echo_sql)

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_engine() -> AsyncEngine:
    """Process-wide engine used by the API."""
    return create_engine_from_settings(get_settings().database)


async def dispose_async_engine() -> None:
    """Close the API engine's pool (application shutdown)."""
    if get_async_engine.cache_info().currsize:
        await get_async_engine().dispose()
        get_async_engine.cache_clear()
        logger.info(f"{__name__}:dispose_async_engine - Engine disposed")


def get_async_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to ``engine`` (default: the API engine).

    autoflush=False and expire_on_commit=False keep returned records readable
    after the commit that wrote them.
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one read session per request.

    Usage:
        @router.get("/jobs/{operation}/{job_id}")
        async def get_job(..., db: AsyncSession = Depends(get_async_db)):
            ...
    """
    async with get_async_session_factory()() as session:
        yield session
