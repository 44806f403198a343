"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, fake blob store and queue, runner settings
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from runner_gateway.boundary.db.base import Base
from runner_gateway.configs.runner import RunnerSettings


class InMemoryBlobStore:
    """Dict-backed stand-in for JobBlobStore."""

    def __init__(self):
        self.inputs: dict[str, bytes] = {}
        self.outputs: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.ensure_buckets = AsyncMock()

    async def put_input(self, key: str, data: bytes) -> None:
        self.inputs[key] = data

    async def get_input(self, key: str) -> bytes:
        return self.inputs[key]

    async def put_output(self, key: str, data: bytes, content_type: str = "application/json") -> None:
        self.outputs[key] = data
        self.content_types[key] = content_type

    async def get_output(self, key: str) -> bytes:
        return self.outputs[key]


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with the schema applied.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Open one session on the in-memory database.

    Yields:
        AsyncSession: Test database session with rollback on exit
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    """Fresh in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def mock_queue():
    """
    Create mock JobQueueClient for testing.

    Returns:
        MagicMock: Queue with async send/ensure_queues/approximate_depth
    """
    queue = MagicMock()
    queue.queue_name = "jobs"
    queue.poison_queue_name = "jobs-poison"
    queue.ensure_queues = AsyncMock()
    queue.send = AsyncMock(return_value="msg-0001")
    queue.delete = AsyncMock()
    queue.receive = AsyncMock(return_value=[])
    queue.approximate_depth = AsyncMock(return_value=0)
    return queue


@pytest.fixture
def runner_settings() -> RunnerSettings:
    """Runner settings pointing at a fake pool endpoint."""
    return RunnerSettings(
        pool_endpoint="https://runner.example.test/",
        token_scope="https://runner.example.test/.default",
    )


@pytest.fixture
def token_provider():
    """Token provider that always hands out the same bearer token."""
    provider = MagicMock()
    provider.get_token = AsyncMock(return_value="token-abc")
    return provider


@pytest.fixture
def recorded_sleeps() -> list[float]:
    """List collecting every backoff delay requested."""
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps):
    """Awaitable sleep that records delays instead of waiting."""

    async def _sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return _sleep
