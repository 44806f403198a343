"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived clients live in the
ServiceCache and are closed by the application lifespan.

Dependencies: runner_gateway.configs, runner_gateway.application, runner_gateway.boundary
System role: DI container for service injection
"""

from functools import lru_cache

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from runner_gateway.application.services import (
    DiagnosticsService,
    JobStatusReader,
    JobSubmitter,
)
from runner_gateway.boundary.aws.s3_client import JobBlobStore
from runner_gateway.boundary.aws.sqs_client import JobQueueClient
from runner_gateway.boundary.db import get_async_db, get_async_session_factory
from runner_gateway.configs import Settings, get_settings
from runner_gateway.core.job_processing.forwarder import RunnerForwarder
from runner_gateway.core.job_processing.token_provider import AzureTokenProvider


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._blob_store = None
        self._queue_client = None
        self._http_client = None
        self._token_provider = None
        self._forwarder = None
        self._job_submitter = None

    @property
    def blob_store(self) -> JobBlobStore:
        """Get cached S3 job blob store."""
        if self._blob_store is None:
            self._blob_store = JobBlobStore.from_settings(get_settings().storage)
        return self._blob_store

    @property
    def queue_client(self) -> JobQueueClient:
        """Get cached SQS work queue client."""
        if self._queue_client is None:
            self._queue_client = JobQueueClient.from_settings(get_settings().storage)
        return self._queue_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get cached HTTP client for runner calls."""
        if self._http_client is None:
            timeout = get_settings().runner.request_timeout_seconds
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        return self._http_client

    @property
    def token_provider(self) -> AzureTokenProvider:
        """Get cached runner token provider."""
        if self._token_provider is None:
            self._token_provider = AzureTokenProvider(scope=get_settings().runner.token_scope)
        return self._token_provider

    @property
    def forwarder(self) -> RunnerForwarder:
        """Get cached runner forwarder."""
        if self._forwarder is None:
            self._forwarder = RunnerForwarder(
                settings=get_settings().runner,
                http_client=self.http_client,
                token_provider=self.token_provider,
            )
        return self._forwarder

    @property
    def job_submitter(self) -> JobSubmitter:
        """Get cached job submitter."""
        if self._job_submitter is None:
            self._job_submitter = JobSubmitter(
                session_factory=get_async_session_factory(),
                blob_store=self.blob_store,
                queue=self.queue_client,
            )
        return self._job_submitter

    async def aclose(self) -> None:
        """Close owned clients and clear all cached instances."""
        if self._http_client is not None:
            await self._http_client.aclose()
        if self._token_provider is not None:
            self._token_provider.close()
        self._blob_store = None
        self._queue_client = None
        self._http_client = None
        self._token_provider = None
        self._forwarder = None
        self._job_submitter = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_job_submitter(
    cache: ServiceCache = Depends(get_service_cache),
) -> JobSubmitter:
    """
    Get job submitter instance.

    Returns:
        JobSubmitter: Cached submitter sharing the S3/SQS clients
    """
    return cache.job_submitter


def get_job_status_reader(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> JobStatusReader:
    """
    Get job status reader instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Service cache providing the blob store

    Returns:
        JobStatusReader: Reader scoped to the request session
    """
    return JobStatusReader(db=db, blob_store=cache.blob_store)


def get_diagnostics_service(
    settings: Settings = Depends(get_settings_dependency),
    cache: ServiceCache = Depends(get_service_cache),
) -> DiagnosticsService:
    """Get diagnostics service instance."""
    return DiagnosticsService(
        settings=settings,
        queue=cache.queue_client,
        forwarder=cache.forwarder,
    )
