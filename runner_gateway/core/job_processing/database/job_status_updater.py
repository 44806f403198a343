"""
Job status updater.

Advances job records through Queued -> Running -> Succeeded/Failed and
records checkpoints and runner diagnostics. Each write opens its own short
session and commits immediately, so progress is visible to status readers
while the runner call is still in flight.

Every write method returns False when the record was already terminal
(another delivery finished the job) and nothing was written.

Dependencies: sqlalchemy
System role: Database persistence layer for the worker
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from runner_gateway.boundary.db.CRUD.job_crud import JobCRUD, job_crud
from runner_gateway.boundary.db.models.job_model import (
    JobRecordModel,
    JobStatus,
    JobStep,
    Operation,
)
from runner_gateway.core.job_processing.models.forward_result import ForwardResult
from runner_gateway.observability.log_utils import clip_text

logger = logging.getLogger(__name__)

RUNNER_SNIPPET_LIMIT = 400
ERROR_MESSAGE_LIMIT = 2000


class JobStatusUpdater:
    """Update job records during processing."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        crud: JobCRUD = job_crud,
    ) -> None:
        """
        Initialize with a session factory.

        Args:
            session_factory: Factory producing one AsyncSession per write
            crud: Job CRUD implementation
        """
        self._session_factory = session_factory
        self._crud = crud

    async def load(self, operation: Operation | str, job_id: str) -> JobRecordModel | None:
        """Read the current record, None when absent."""
        async with self._session_factory() as session:
            return await self._crud.get_by_key(session, operation, job_id)

    async def _write(
        self,
        action: str,
        operation: Operation | str,
        job_id: str,
        **values,
    ) -> JobRecordModel | None:
        async with self._session_factory() as session:
            try:
                record = await self._crud.guarded_update(session, operation, job_id, **values)
                await session.commit()
            except Exception as e:
                logger.error(
                    f"{__name__}:{action} - {type(e).__name__}: {e}",
                    extra={"operation": Operation(operation).value, "job_id": job_id},
                )
                await session.rollback()
                raise

        if record is None:
            logger.info(
                f"{__name__}:{action} - Record terminal or missing, write skipped",
                extra={"operation": Operation(operation).value, "job_id": job_id},
            )
        return record

    async def mark_running(self, operation: Operation | str, job_id: str) -> JobRecordModel | None:
        """
        Mark job as Running and count the attempt.

        Returns:
            Updated record, or None when the job is already terminal
        """
        async with self._session_factory() as session:
            try:
                record = await self._crud.mark_running(session, operation, job_id)
                await session.commit()
            except Exception as e:
                logger.error(
                    f"{__name__}:mark_running - {type(e).__name__}: {e}",
                    extra={"operation": Operation(operation).value, "job_id": job_id},
                )
                await session.rollback()
                raise

        if record is not None:
            logger.info(
                f"{__name__}:mark_running - Job marked as Running",
                extra={
                    "operation": Operation(operation).value,
                    "job_id": job_id,
                    "attempts": record.attempts,
                },
            )
        return record

    async def checkpoint(self, operation: Operation | str, job_id: str, step: JobStep) -> bool:
        """Record a progress checkpoint without changing status."""
        record = await self._write("checkpoint", operation, job_id, last_step=step.value)
        return record is not None

    async def record_runner_response(
        self,
        operation: Operation | str,
        job_id: str,
        result: ForwardResult,
    ) -> bool:
        """Persist runner status, content type and body snippet."""
        record = await self._write(
            "record_runner_response",
            operation,
            job_id,
            last_step=JobStep.RUNNER_RESPONDED.value,
            last_http_status=result.status_code,
            last_content_type=result.content_type,
            runner_snippet=clip_text(result.body, RUNNER_SNIPPET_LIMIT),
        )
        return record is not None

    async def mark_succeeded(
        self,
        operation: Operation | str,
        job_id: str,
        output_ref: str,
    ) -> bool:
        """Mark job as Succeeded with its output blob."""
        record = await self._write(
            "mark_succeeded",
            operation,
            job_id,
            status=JobStatus.SUCCEEDED,
            output_ref=output_ref,
            error_message=None,
            last_step=JobStep.SUCCEEDED.value,
        )
        return record is not None

    async def mark_failed(
        self,
        operation: Operation | str,
        job_id: str,
        error_message: str,
        step: JobStep = JobStep.RUNNER_FAILED,
    ) -> bool:
        """
        Mark job as Failed.

        Args:
            operation: Operation partition
            job_id: Job identifier
            error_message: Failure summary (clipped to 2000 characters)
            step: Checkpoint label (RunnerFailed or Exception)
        """
        record = await self._write(
            "mark_failed",
            operation,
            job_id,
            status=JobStatus.FAILED,
            error_message=clip_text(error_message, ERROR_MESSAGE_LIMIT),
            last_step=step.value,
        )
        return record is not None
