"""
Queue-driven job worker.

Advances one job per delivered work message:
load record -> mark Running -> load input -> call runner -> store output ->
Succeeded (or Failed).

Delivery is at-least-once, so the worker is written to be safe under
duplicates: terminal records are skipped up front and every write is
guarded against terminal state, so a second delivery can never undo the
first one's result.

Dependencies: runner_gateway.boundary, runner_gateway.core.job_processing
System role: Job lifecycle engine
"""

import json
import logging
from enum import Enum

from pydantic import ValidationError as PydanticValidationError

from runner_gateway.boundary.aws.s3_client import JobBlobStore, blob_name
from runner_gateway.boundary.db.models.job_model import JobStep
from runner_gateway.core.exceptions import JobNotFoundError, MessageParseError
from runner_gateway.core.job_processing.database.job_status_updater import (
    ERROR_MESSAGE_LIMIT,
    JobStatusUpdater,
)
from runner_gateway.core.job_processing.forwarder import RunnerForwarder
from runner_gateway.core.job_processing.models.forward_result import ForwardResult
from runner_gateway.core.job_processing.models.job_message import WorkMessage
from runner_gateway.observability.correlation import correlation_scope
from runner_gateway.observability.log_utils import clip_text

logger = logging.getLogger(__name__)

RUNNER_ERROR_BODY_LIMIT = 1000


class WorkOutcome(str, Enum):
    """Result of processing one delivery."""

    DROPPED = "dropped"  # structurally invalid message, acknowledged
    SKIPPED = "skipped"  # job already terminal, nothing done
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def parse_work_message(raw: str | bytes) -> WorkMessage:
    """
    Parse and validate a work message body.

    Raises:
        MessageParseError: Empty body, invalid JSON or wrong shape
    """
    if not raw or not raw.strip():
        raise MessageParseError("Empty message body")
    try:
        return WorkMessage.model_validate_json(raw)
    except PydanticValidationError as e:
        raise MessageParseError(f"Invalid work message: {e.error_count()} error(s)") from e


def runner_error_summary(result: ForwardResult) -> str:
    """Bounded failure text for a non-2xx runner response."""
    return f"Runner returned {result.status_code}: {result.text[:RUNNER_ERROR_BODY_LIMIT]}"


def build_output_document(operation: str, result: ForwardResult) -> bytes:
    """
    Output blob contents for a successful runner call.

    JSON-like bodies are stored verbatim; anything else is wrapped in an
    ``{operation, ok, contentType, body}`` envelope.
    """
    if result.is_json:
        return result.body
    envelope = {
        "operation": operation,
        "ok": True,
        "contentType": result.content_type,
        "body": result.text,
    }
    return json.dumps(envelope).encode("utf-8")


class JobWorker:
    """Processes work messages against the runner."""

    def __init__(
        self,
        status_updater: JobStatusUpdater,
        blob_store: JobBlobStore,
        forwarder: RunnerForwarder,
    ) -> None:
        """
        Initialize worker.

        Args:
            status_updater: Job record writer
            blob_store: Input/output blob store
            forwarder: Runner client
        """
        self._updater = status_updater
        self._blobs = blob_store
        self._forwarder = forwarder

    async def process_message(self, raw: str | bytes) -> WorkOutcome:
        """
        Process one delivered work message.

        Args:
            raw: Message body as received from the queue

        Returns:
            WorkOutcome: What happened to the job

        Raises:
            JobNotFoundError: No record for the message; the delivery should
                be reported failed so the queue redelivers / dead-letters it
            Exception: Only when recording a failure itself fails, so the
                message is redelivered instead of leaving the job Running
        """
        try:
            message = parse_work_message(raw)
        except MessageParseError as e:
            logger.warning(
                f"{__name__}:process_message - MessageParseError: {e}",
                extra={"body": clip_text(raw, 200)},
            )
            return WorkOutcome.DROPPED

        operation = message.operation.value
        job_id = message.job_id
        with correlation_scope(job_id[:12]):
            return await self._process(operation, job_id)

    async def _process(self, operation: str, job_id: str) -> WorkOutcome:
        record = await self._updater.load(operation, job_id)
        if record is None:
            logger.error(
                f"{__name__}:process_message - Job record not found",
                extra={"operation": operation, "job_id": job_id},
            )
            raise JobNotFoundError(operation, job_id)

        if record.status.is_terminal:
            logger.info(
                f"{__name__}:process_message - Job already terminal, skipping",
                extra={"operation": operation, "job_id": job_id, "status": record.status.value},
            )
            return WorkOutcome.SKIPPED

        running = await self._updater.mark_running(operation, job_id)
        if running is None:
            return WorkOutcome.SKIPPED

        try:
            return await self._run(operation, job_id, running.input_ref, running.session_id)
        except Exception as e:
            logger.exception(
                f"{__name__}:process_message - {type(e).__name__}: {e}",
                extra={"operation": operation, "job_id": job_id},
            )
            message = clip_text(f"{type(e).__name__}: {e}", ERROR_MESSAGE_LIMIT)
            written = await self._updater.mark_failed(
                operation, job_id, message, step=JobStep.EXCEPTION
            )
            return WorkOutcome.FAILED if written else WorkOutcome.SKIPPED

    async def _run(
        self,
        operation: str,
        job_id: str,
        input_ref: str,
        session_id: str,
    ) -> WorkOutcome:
        request_body = await self._blobs.get_input(input_ref)
        if not await self._updater.checkpoint(operation, job_id, JobStep.INPUT_LOADED):
            return WorkOutcome.SKIPPED

        if not await self._updater.checkpoint(operation, job_id, JobStep.CALLING_RUNNER):
            return WorkOutcome.SKIPPED

        result = await self._forwarder.forward(operation, request_body, session_id)
        if not await self._updater.record_runner_response(operation, job_id, result):
            return WorkOutcome.SKIPPED

        if result.is_success:
            output_ref = blob_name(job_id)
            await self._blobs.put_output(
                output_ref,
                build_output_document(operation, result),
            )
            written = await self._updater.mark_succeeded(operation, job_id, output_ref)
            if written:
                logger.info(
                    f"{__name__}:process_message - Job succeeded",
                    extra={"operation": operation, "job_id": job_id},
                )
            return WorkOutcome.SUCCEEDED if written else WorkOutcome.SKIPPED

        written = await self._updater.mark_failed(
            operation, job_id, runner_error_summary(result), step=JobStep.RUNNER_FAILED
        )
        if written:
            logger.warning(
                f"{__name__}:process_message - Runner rejected job",
                extra={
                    "operation": operation,
                    "job_id": job_id,
                    "status_code": result.status_code,
                },
            )
        return WorkOutcome.FAILED if written else WorkOutcome.SKIPPED
