"""
Job submitter.

Accepts a compile/run/analyse request: allocates identifiers, stores the
raw body, creates the Queued record and enqueues the work message, in that
order. A failed upload leaves neither record nor message behind.

Dependencies: runner_gateway.boundary, sqlalchemy
System role: Job intake orchestration
"""

import asyncio
import logging
import uuid

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from runner_gateway.boundary.aws.s3_client import JobBlobStore, blob_name
from runner_gateway.boundary.aws.sqs_client import JobQueueClient
from runner_gateway.boundary.db.CRUD.job_crud import job_crud
from runner_gateway.boundary.db.create_tables import create_schema
from runner_gateway.boundary.db.models.job_model import Operation
from runner_gateway.core.exceptions import SubmissionError, ValidationError
from runner_gateway.core.job_processing.models.job_message import WorkMessage

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 12


class SubmittedJob(BaseModel):
    """Identifiers of an accepted job."""

    job_id: str
    operation: Operation


def make_session_id(job_id: str) -> str:
    """Runner session identifier: ``("sess-" + job_id)[:12]``."""
    return f"sess-{job_id}"[:SESSION_ID_LENGTH]


def parse_operation(operation: str) -> Operation:
    """
    Validate an operation name.

    Raises:
        ValidationError: Not one of compile / run / analyse
    """
    try:
        return Operation((operation or "").strip().lower())
    except ValueError as e:
        raise ValidationError(
            f"Unknown operation: {operation}", field="operation"
        ) from e


class JobSubmitter:
    """
    Job intake orchestrator.

    Long-lived: storage resources (buckets, queues, table) are ensured once
    per instance, on first submit.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_store: JobBlobStore,
        queue: JobQueueClient,
    ) -> None:
        """
        Initialize job submitter.

        Args:
            session_factory: Factory for record-store sessions
            blob_store: Input/output blob store
            queue: Work queue client
        """
        self._session_factory = session_factory
        self._blobs = blob_store
        self._queue = queue
        self._resources_ready = False
        self._resources_lock = asyncio.Lock()

    async def ensure_resources(self) -> None:
        """Create buckets, queues and the jobs table if missing (idempotent)."""
        if self._resources_ready:
            return
        async with self._resources_lock:
            if self._resources_ready:
                return
            await self._blobs.ensure_buckets()
            await self._queue.ensure_queues()
            async with self._session_factory() as session:
                await create_schema(await session.connection())
                await session.commit()
            self._resources_ready = True
            logger.info(f"{__name__}:ensure_resources - Storage resources ready")

    async def submit(self, operation: str, request_body: bytes) -> SubmittedJob:
        """
        Durably accept a job.

        Args:
            operation: compile / run / analyse
            request_body: Raw request bytes (stored verbatim)

        Returns:
            SubmittedJob: Allocated identifiers

        Raises:
            ValidationError: Unknown operation or empty body
            SubmissionError: Any storage failure during intake
        """
        op = parse_operation(operation)
        if not request_body or not request_body.strip():
            raise ValidationError("body_empty", field="body")

        job_id = uuid.uuid4().hex
        session_id = make_session_id(job_id)
        input_ref = blob_name(job_id)

        try:
            await self.ensure_resources()

            await self._blobs.put_input(input_ref, request_body)

            async with self._session_factory() as session:
                try:
                    await job_crud.create_job(
                        session,
                        operation=op,
                        job_id=job_id,
                        session_id=session_id,
                        input_ref=input_ref,
                    )
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

            await self._queue.send(WorkMessage(operation=op, job_id=job_id).to_body())

        except Exception as e:
            logger.error(
                f"{__name__}:submit - {type(e).__name__}: {e}",
                extra={"operation": op.value, "job_id": job_id},
            )
            raise SubmissionError(
                f"Failed to enqueue job: {type(e).__name__}",
                operation=op.value,
                job_id=job_id,
            ) from e

        logger.info(
            f"{__name__}:submit - Job enqueued",
            extra={
                "operation": op.value,
                "job_id": job_id,
                "session_id": session_id,
                "size_bytes": len(request_body),
            },
        )
        return SubmittedJob(job_id=job_id, operation=op)
