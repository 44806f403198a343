"""
Job status reader.

Read-only view of a job: state, failure summary, stored output and, on
request, processing diagnostics. Eventually consistent with the worker.

Dependencies: runner_gateway.boundary, sqlalchemy
System role: Job status retrieval orchestration
"""

import logging
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from runner_gateway.boundary.aws.s3_client import JobBlobStore
from runner_gateway.boundary.db.base import as_utc
from runner_gateway.boundary.db.CRUD.job_crud import job_crud
from runner_gateway.boundary.db.models.job_model import (
    JobRecordModel,
    JobStatus,
    Operation,
)
from runner_gateway.core.exceptions import JobNotFoundError

logger = logging.getLogger(__name__)


class JobDiagnostics(BaseModel):
    """Processing details exposed with ``debug=true``."""

    last_step: str | None = None
    attempts: int = 0
    last_http_status: int | None = None
    last_content_type: str | None = None
    runner_snippet: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: JobRecordModel) -> "JobDiagnostics":
        return cls(
            last_step=record.last_step,
            attempts=record.attempts,
            last_http_status=record.last_http_status,
            last_content_type=record.last_content_type,
            runner_snippet=record.runner_snippet,
            created_at=as_utc(record.created_at),
            updated_at=as_utc(record.updated_at),
        )


class JobStatusView(BaseModel):
    """What a caller may learn about a job."""

    job_id: str
    operation: Operation
    status: JobStatus
    error: str | None = None
    output: bytes | None = None
    output_ref: str | None = None
    warning: str | None = None
    diagnostics: JobDiagnostics | None = None

    @property
    def is_pending(self) -> bool:
        return self.status in (JobStatus.QUEUED, JobStatus.RUNNING)


class JobStatusReader:
    """Job status lookup for the HTTP layer."""

    def __init__(self, db: AsyncSession, blob_store: JobBlobStore) -> None:
        """
        Initialize job status reader.

        Args:
            db: AsyncSession for database operations
            blob_store: Store holding job outputs
        """
        self.db = db
        self._blobs = blob_store

    async def get_status(
        self,
        operation: Operation | str,
        job_id: str,
        include_output: bool = True,
        debug: bool = False,
    ) -> JobStatusView:
        """
        Look up a job.

        Args:
            operation: Operation partition
            job_id: Job identifier
            include_output: Load the stored output for succeeded jobs
            debug: Attach processing diagnostics

        Returns:
            JobStatusView

        Raises:
            JobNotFoundError: Unknown operation or job
        """
        try:
            op = Operation(operation)
        except ValueError as e:
            raise JobNotFoundError(str(operation), job_id) from e

        record = await job_crud.get_by_key(self.db, op, job_id)
        if record is None:
            raise JobNotFoundError(op.value, job_id)

        view = JobStatusView(
            job_id=record.job_id,
            operation=record.operation,
            status=record.status,
            diagnostics=JobDiagnostics.from_record(record) if debug else None,
        )

        if record.status == JobStatus.FAILED:
            view.error = record.error_message
        elif record.status == JobStatus.SUCCEEDED:
            view.output_ref = record.output_ref
            if include_output and record.output_ref:
                await self._attach_output(view, record.output_ref)

        return view

    async def _attach_output(self, view: JobStatusView, output_ref: str) -> None:
        try:
            view.output = await self._blobs.get_output(output_ref)
        except Exception as e:
            logger.warning(
                f"{__name__}:get_status - Output unreadable: {type(e).__name__}: {e}",
                extra={"job_id": view.job_id, "output_ref": output_ref},
            )
            view.warning = "output_unavailable"
