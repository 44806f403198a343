"""
Job record CRUD operations.

Provides creation, keyed lookup and the terminal-guarded overwrite used by
every worker write.

Dependencies: sqlalchemy, runner_gateway.boundary.db.models
System role: Job persistence operations for queued runner calls
"""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from runner_gateway.boundary.db.base import as_utc, utc_now
from runner_gateway.boundary.db.models.job_model import (
    TERMINAL_STATUSES,
    JobRecordModel,
    JobStatus,
    JobStep,
    Operation,
)


class JobCRUD:
    """
    CRUD operations for JobRecordModel.

    Writes never touch a terminal record: every update carries
    ``status NOT IN (Succeeded, Failed)`` in its WHERE clause, so whichever
    delivery finishes first wins and later writers see no row.
    """

    model = JobRecordModel

    def _key_clause(self, operation: Operation | str, job_id: str):
        return (
            (JobRecordModel.operation == Operation(operation))
            & (JobRecordModel.job_id == job_id)
        )

    async def create_job(
        self,
        session: AsyncSession,
        operation: Operation | str,
        job_id: str,
        session_id: str,
        input_ref: str,
        now: datetime | None = None,
    ) -> JobRecordModel:
        """
        Insert a freshly submitted job in state Queued. The caller commits.

        Args:
            session: Async database session
            operation: Operation partition
            job_id: Allocated job identifier
            session_id: Runner session identifier
            input_ref: Input blob name
            now: Creation time (defaults to current UTC)

        Returns:
            Created JobRecordModel
        """
        created_at = now or utc_now()
        record = JobRecordModel(
            operation=Operation(operation),
            job_id=job_id,
            status=JobStatus.QUEUED,
            session_id=session_id,
            input_ref=input_ref,
            attempts=0,
            last_step=JobStep.ENQUEUED.value,
            output_ref=None,
            error_message=None,
            last_http_status=None,
            last_content_type=None,
            runner_snippet=None,
            created_at=created_at,
            updated_at=created_at,
        )
        session.add(record)
        await session.flush()
        return record

    async def get_by_key(
        self,
        session: AsyncSession,
        operation: Operation | str,
        job_id: str,
    ) -> JobRecordModel | None:
        """
        Retrieve a job by its (operation, job_id) key.

        Args:
            session: Async database session
            operation: Operation partition
            job_id: Job identifier

        Returns:
            JobRecordModel if found, None otherwise
        """
        stmt = select(JobRecordModel).where(self._key_clause(operation, job_id))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def guarded_update(
        self,
        session: AsyncSession,
        operation: Operation | str,
        job_id: str,
        **values: Any,
    ) -> JobRecordModel | None:
        """
        Overwrite fields of a non-terminal job.

        ``updated_at`` is stamped with max(now, stored updated_at) so it never
        moves backwards.

        Args:
            session: Async database session
            operation: Operation partition
            job_id: Job identifier
            **values: Column values to write (SQL expressions allowed)

        Returns:
            The updated record, or None when the job is missing or terminal
        """
        current = await session.execute(
            select(JobRecordModel.updated_at).where(self._key_clause(operation, job_id))
        )
        previous = current.scalar_one_or_none()
        if previous is None:
            return None

        now = utc_now()
        values["updated_at"] = max(now, as_utc(previous))

        stmt = (
            update(JobRecordModel)
            .where(self._key_clause(operation, job_id))
            .where(JobRecordModel.status.not_in(list(TERMINAL_STATUSES)))
            .values(**values)
            .returning(JobRecordModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_running(
        self,
        session: AsyncSession,
        operation: Operation | str,
        job_id: str,
    ) -> JobRecordModel | None:
        """
        Move a job to Running and count the attempt.

        Args:
            session: Async database session
            operation: Operation partition
            job_id: Job identifier

        Returns:
            Updated record (with incremented attempts), None if missing or terminal
        """
        return await self.guarded_update(
            session,
            operation,
            job_id,
            status=JobStatus.RUNNING,
            attempts=JobRecordModel.attempts + 1,
            last_step=JobStep.RUNNING.value,
        )


job_crud = JobCRUD()
