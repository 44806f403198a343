"""
Lambda handler for SQS-triggered job processing.

Each record in the batch is processed as its own asyncio task. Records that
must be redelivered are reported through the partial batch response
(``ReportBatchItemFailures``); everything else is acknowledged.

Environment variables:
- RUNNER_POOL_ENDPOINT: Runner base address
- POSTGRES_URL (or POSTGRES_HOST/...): Job record database
- STORAGE_INPUT_BUCKET / STORAGE_OUTPUT_BUCKET: Job blobs
- LOG_LEVEL: Logging level

Dependencies: runner_gateway.core.job_processing
System role: Lambda entry point for async job processing
"""

import asyncio
import logging
import os
from typing import Any, Callable, Dict

from dotenv import load_dotenv

from runner_gateway.core.exceptions import JobNotFoundError
from runner_gateway.core.job_processing.job_worker import JobWorker, WorkOutcome
from runner_gateway.core.job_processing.models.job_message import SQSRecord
from runner_gateway.core.job_processing.runtime import WorkerRuntime

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))


async def _process_record(worker: JobWorker, record: SQSRecord) -> WorkOutcome:
    try:
        outcome = await worker.process_message(record.body)
    except JobNotFoundError as e:
        logger.warning(
            f"{__name__}:handler - JobNotFoundError: {e}",
            extra={"message_id": record.messageId},
        )
        raise
    except Exception as e:
        logger.error(
            f"{__name__}:handler - {type(e).__name__}: {e}",
            extra={"message_id": record.messageId},
        )
        raise

    logger.info(
        f"{__name__}:handler - Record processed",
        extra={"message_id": record.messageId, "outcome": outcome.value},
    )
    return outcome


async def process_batch(
    event: Dict[str, Any],
    runtime_factory: Callable[[], WorkerRuntime] = WorkerRuntime,
) -> Dict[str, Any]:
    """
    Process an SQS batch concurrently.

    Args:
        event: SQS event with Records array
        runtime_factory: Builds the worker runtime (tests inject a fake)

    Returns:
        Dict: ``{"batchItemFailures": [{"itemIdentifier": messageId}, ...]}``
    """
    records = [SQSRecord.model_validate(r) for r in event.get("Records", [])]
    if not records:
        return {"batchItemFailures": []}

    async with runtime_factory() as worker:
        results = await asyncio.gather(
            *(_process_record(worker, record) for record in records),
            return_exceptions=True,
        )

    failures = [
        {"itemIdentifier": record.messageId}
        for record, result in zip(records, results)
        if isinstance(result, BaseException)
    ]
    logger.info(
        f"{__name__}:handler - Batch complete",
        extra={"record_count": len(records), "failed_count": len(failures)},
    )
    return {"batchItemFailures": failures}


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for SQS work messages.

    Args:
        event: SQS event with Records array
        context: Lambda context object

    Returns:
        Dict: Partial batch response listing records to redeliver
    """
    logger.info(
        f"{__name__}:handler - Received SQS event",
        extra={"record_count": len(event.get("Records", []))},
    )
    return asyncio.run(process_batch(event))
