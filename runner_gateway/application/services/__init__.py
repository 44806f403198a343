"""Service orchestrators."""

from .diagnostics_service import DiagnosticsService
from .job_status_reader import JobStatusReader, JobStatusView
from .job_submitter import JobSubmitter, SubmittedJob

__all__ = [
    "DiagnosticsService",
    "JobStatusReader",
    "JobStatusView",
    "JobSubmitter",
    "SubmittedJob",
]
