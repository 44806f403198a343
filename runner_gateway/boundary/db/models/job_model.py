"""
Job record ORM model.

The authoritative state of one submitted job, partitioned by operation.
Created by the submitter, advanced only by the worker.

Dependencies: sqlalchemy, runner_gateway.boundary.db.base
System role: Durable job tracking for queued runner calls
"""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from runner_gateway.boundary.db.base import Base, TimestampMixin


class Operation(str, enum.Enum):
    """
    Operations the runner accepts.

    The value doubles as the URL path segment and the runner ``action``.
    """

    COMPILE = "compile"
    RUN = "run"
    ANALYSE = "analyse"


class JobStatus(str, enum.Enum):
    """
    Job lifecycle states.

    QUEUED: Record created and work message enqueued
    RUNNING: A worker delivery reached "mark running"
    SUCCEEDED: Runner returned 2xx; output blob written (terminal)
    FAILED: Runner rejected the call or processing raised (terminal)
    """

    QUEUED = "Queued"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED})


class JobStep(str, enum.Enum):
    """Checkpoint labels written to ``last_step`` for diagnostics."""

    ENQUEUED = "Enqueued"
    RUNNING = "Running"
    INPUT_LOADED = "InputLoaded"
    CALLING_RUNNER = "CallingRunner"
    RUNNER_RESPONDED = "RunnerResponded"
    SUCCEEDED = "Succeeded"
    RUNNER_FAILED = "RunnerFailed"
    EXCEPTION = "Exception"


class JobRecordModel(Base, TimestampMixin):
    """
    Job record keyed by (operation, job_id).

    Attributes:
        operation: Operation partition (compile/run/analyse)
        job_id: 32-char hex identifier
        status: Lifecycle state
        session_id: Runner session identifier, fixed for the job
        input_ref: Input blob name
        output_ref: Output blob name, set only on success
        attempts: Deliveries that reached "mark running"
        last_step: Last checkpoint reached
        error_message: Bounded failure summary
        last_http_status: Last runner status code
        last_content_type: Last runner content type
        runner_snippet: First 400 characters of the last runner body
        created_at: Submission time (UTC)
        updated_at: Last write time (UTC, non-decreasing)

    Invariants:
        status only moves Queued -> Running -> {Succeeded, Failed};
        terminal rows are never rewritten (see JobCRUD.guarded_update).
    """

    __tablename__ = "jobs"

    operation: Mapped[Operation] = mapped_column(
        Enum(
            Operation,
            name="job_operation",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        primary_key=True,
    )
    job_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    status: Mapped[JobStatus] = mapped_column(
        Enum(
            JobStatus,
            name="job_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=JobStatus.QUEUED,
        index=True,
    )
    session_id: Mapped[str] = mapped_column(String(12), nullable=False)
    input_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    output_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_step: Mapped[str | None] = mapped_column(String(32), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_http_status: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    runner_snippet: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<JobRecordModel(operation={self.operation.value}, job_id={self.job_id}, "
            f"status={self.status.value}, attempts={self.attempts})>"
        )
