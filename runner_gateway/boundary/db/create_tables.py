"""
Jobs table provisioning.

``create_schema`` is called lazily by the job submitter on first use;
running this module creates the table up front:

    python -m runner_gateway.boundary.db.create_tables

Dependencies: sqlalchemy
System role: Database schema initialization
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

# Importing the models registers them on Base.metadata
from runner_gateway.boundary.db.base import Base
from runner_gateway.boundary.db.models import JobRecordModel  # noqa: F401
from runner_gateway.boundary.db.connection import dispose_async_engine, get_async_engine

logger = logging.getLogger(__name__)


async def create_schema(connection: AsyncConnection) -> None:
    """CREATE TABLE IF NOT EXISTS for every registered model, on an open connection."""
    await connection.run_sync(Base.metadata.create_all)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create missing tables in their own transaction.

    Args:
        engine: Engine to use (defaults to the API engine)
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await create_schema(conn)
    logger.info(f"{__name__}:create_all_tables - Tables ensured")


async def _main() -> None:
    try:
        await create_all_tables()
    finally:
        await dispose_async_engine()


if __name__ == "__main__":
    asyncio.run(_main())
