"""
Long-polling SQS consumer.

Runs the job worker outside Lambda (local development, containers). Each
received message is processed as its own asyncio task; a message is deleted
only when processing returns an outcome. Messages whose processing raised
stay on the queue and reappear after the visibility timeout, eventually
landing in the poison queue.

Usage:
    python -m runner_gateway.workers.queue_poller

Dependencies: runner_gateway.core.job_processing, runner_gateway.boundary.aws
System role: Background job processing loop
"""

import asyncio
import logging

from runner_gateway.boundary.aws.sqs_client import JobQueueClient
from runner_gateway.configs import Settings, get_settings
from runner_gateway.core.job_processing.job_worker import JobWorker
from runner_gateway.core.job_processing.runtime import WorkerRuntime
from runner_gateway.observability.logger import configure_logging

logger = logging.getLogger(__name__)


async def handle_message(worker: JobWorker, queue: JobQueueClient, message: dict) -> bool:
    """
    Process one received SQS message and acknowledge it on success.

    Args:
        worker: Job worker
        queue: Work queue client used for deletion
        message: Raw SQS message (MessageId, ReceiptHandle, Body)

    Returns:
        bool: True when the message was acknowledged
    """
    message_id = message.get("MessageId")
    try:
        outcome = await worker.process_message(message.get("Body", ""))
    except Exception as e:
        logger.error(
            f"{__name__}:handle_message - {type(e).__name__}: {e}",
            extra={"message_id": message_id},
        )
        return False

    try:
        await queue.delete(message["ReceiptHandle"])
    except Exception as e:
        # Processed but still on the queue; it reappears after the visibility timeout
        logger.error(
            f"{__name__}:handle_message - Delete failed: {type(e).__name__}: {e}",
            extra={"message_id": message_id, "outcome": outcome.value},
        )
        return False

    logger.info(
        f"{__name__}:handle_message - Message acknowledged",
        extra={"message_id": message_id, "outcome": outcome.value},
    )
    return True


async def poll_once(worker: JobWorker, queue: JobQueueClient, wait_seconds: int) -> int:
    """
    Receive one batch and process it concurrently.

    Returns:
        int: Number of messages received
    """
    messages = await queue.receive(max_messages=10, wait_seconds=wait_seconds)
    if messages:
        await asyncio.gather(*(handle_message(worker, queue, m) for m in messages))
    return len(messages)


async def run_poller(
    settings: Settings | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    """
    Poll the work queue until ``stop_event`` is set.

    Args:
        settings: Application settings (defaults to get_settings())
        stop_event: Cooperative shutdown signal
    """
    settings = settings or get_settings()
    stop_event = stop_event or asyncio.Event()
    queue = JobQueueClient.from_settings(settings.storage)
    await queue.ensure_queues()

    logger.info(
        f"{__name__}:run_poller - Polling started",
        extra={"queue": settings.storage.jobs_queue},
    )
    async with WorkerRuntime(settings) as worker:
        while not stop_event.is_set():
            try:
                await poll_once(worker, queue, settings.storage.receive_wait_seconds)
            except Exception as e:
                logger.exception(f"{__name__}:run_poller - {type(e).__name__}: {e}")
                await asyncio.sleep(settings.storage.receive_wait_seconds)
    logger.info(f"{__name__}:run_poller - Polling stopped")


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)
    asyncio.run(run_poller())


if __name__ == "__main__":
    main()
