"""Worker-side persistence."""

from runner_gateway.core.job_processing.database.job_status_updater import JobStatusUpdater

__all__ = ["JobStatusUpdater"]
