"""
Worker runtime wiring.

Builds the worker and its long-lived collaborators (database engine, HTTP
client, token credential, S3 client) from settings, and closes them on exit.
Used by the Lambda handler (one runtime per batch) and the queue poller
(one runtime per process).

Dependencies: httpx, sqlalchemy, runner_gateway.configs
System role: Composition root for the worker side
"""

import logging

import httpx

from runner_gateway.boundary.aws.s3_client import JobBlobStore
from runner_gateway.boundary.db.connection import (
    create_engine_from_settings,
    get_async_session_factory,
)
from runner_gateway.configs import Settings, get_settings
from runner_gateway.core.job_processing.database.job_status_updater import JobStatusUpdater
from runner_gateway.core.job_processing.forwarder import RunnerForwarder
from runner_gateway.core.job_processing.job_worker import JobWorker
from runner_gateway.core.job_processing.token_provider import AzureTokenProvider

logger = logging.getLogger(__name__)


class WorkerRuntime:
    """
    Async context manager yielding a ready JobWorker.

    Usage:
        async with WorkerRuntime() as worker:
            outcome = await worker.process_message(body)
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._engine = None
        self._http_client: httpx.AsyncClient | None = None
        self._token_provider: AzureTokenProvider | None = None

    async def __aenter__(self) -> JobWorker:
        settings = self._settings
        self._engine = create_engine_from_settings(settings.database)
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.runner.request_timeout_seconds),
        )
        self._token_provider = AzureTokenProvider(scope=settings.runner.token_scope)

        forwarder = RunnerForwarder(
            settings=settings.runner,
            http_client=self._http_client,
            token_provider=self._token_provider,
        )
        worker = JobWorker(
            status_updater=JobStatusUpdater(get_async_session_factory(self._engine)),
            blob_store=JobBlobStore.from_settings(settings.storage),
            forwarder=forwarder,
        )
        logger.info(f"{__name__}:__aenter__ - Worker runtime started")
        return worker

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
        if self._token_provider is not None:
            self._token_provider.close()
        if self._engine is not None:
            await self._engine.dispose()
        logger.info(f"{__name__}:__aexit__ - Worker runtime closed")
