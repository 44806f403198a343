"""
Diagnostics service.

Reports which settings are present (never their values), optional
approximate queue depths and an optional authenticated runner ping.

Dependencies: runner_gateway.boundary.aws, runner_gateway.core.job_processing
System role: Operational probe behind GET /diagnostics
"""

import logging
from typing import Any

from runner_gateway.boundary.aws.sqs_client import JobQueueClient
from runner_gateway.configs import Settings
from runner_gateway.core.job_processing.forwarder import RunnerForwarder

logger = logging.getLogger(__name__)


class DiagnosticsService:
    """Builds the diagnostics report."""

    def __init__(
        self,
        settings: Settings,
        queue: JobQueueClient,
        forwarder: RunnerForwarder,
    ) -> None:
        self._settings = settings
        self._queue = queue
        self._forwarder = forwarder

    def settings_presence(self) -> dict[str, Any]:
        settings = self._settings
        return {
            "RUNNER_POOL_ENDPOINT_set": bool(settings.runner.base_url),
            "STORAGE_ENDPOINT_URL_set": bool(settings.storage.endpoint_url),
            "POSTGRES_URL_set": bool(settings.database.url),
            "environment": settings.environment,
        }

    async def queue_depths(self) -> dict[str, Any]:
        """Approximate message counts for the work and poison queues."""
        try:
            jobs = await self._queue.approximate_depth(self._queue.queue_name)
            poison = await self._queue.approximate_depth(self._queue.poison_queue_name)
        except Exception as e:
            logger.warning(
                f"{__name__}:queue_depths - {type(e).__name__}: {e}",
            )
            return {"error": "Queue diagnostics failed", "exception": str(e)}
        return {
            "jobs": {"approxMessageCount": jobs},
            "jobsPoison": {"approxMessageCount": poison},
        }

    async def report(self, ping_runner: bool = False, ping_queues: bool = False) -> dict[str, Any]:
        """
        Assemble the diagnostics report.

        Args:
            ping_runner: Include a runner health probe
            ping_queues: Include queue depths

        Returns:
            dict: JSON-serializable report
        """
        result = self.settings_presence()
        if ping_queues:
            result["queues"] = await self.queue_depths()
        if ping_runner:
            result["runnerPing"] = await self._forwarder.ping()
        return result
