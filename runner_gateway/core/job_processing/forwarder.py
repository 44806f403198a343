"""
Resilient forwarding client for the runner.

Projects a submitted request onto the runner's payload schema and POSTs it
to ``{base}/runner?identifier={sessionId}`` with bearer auth, retrying
transient outcomes per runner_gateway.core.job_processing.retry.

Runner error statuses are returned as ForwardResult values. Only a missing
runner address (ConfigurationError) and token failure
(TokenAcquisitionError) raise.

Dependencies: httpx, tenacity, pydantic
System role: Outbound integration with the rate-limited execution backend
"""

import json
import logging
import time
from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError as PydanticValidationError

from runner_gateway.configs.runner import RunnerSettings
from runner_gateway.core.exceptions import ConfigurationError
from runner_gateway.core.job_processing.models.forward_result import (
    DEFAULT_CONTENT_TYPE,
    ForwardResult,
    RunnerPayload,
)
from runner_gateway.core.job_processing.retry import build_runner_retrying
from runner_gateway.core.job_processing.token_provider import TokenProvider
from runner_gateway.observability.correlation import (
    get_correlation_id,
    new_correlation_id,
)
from runner_gateway.observability.log_utils import clip_text, preview

logger = logging.getLogger(__name__)

PING_SNIPPET_LIMIT = 500


def _media_type(response: httpx.Response) -> str:
    header = response.headers.get("content-type")
    if not header:
        return DEFAULT_CONTENT_TYPE
    return header.split(";", 1)[0].strip() or DEFAULT_CONTENT_TYPE


def build_payload(operation: str, request_body: bytes) -> RunnerPayload | None:
    """
    Parse a submitted body into the runner payload.

    Args:
        operation: Operation name, used as ``action``
        request_body: Raw submitted bytes

    Returns:
        RunnerPayload, or None when the body is not a JSON object with
        correctly typed fields
    """
    try:
        document = json.loads(request_body)
    except ValueError:
        return None
    if not isinstance(document, dict):
        return None
    try:
        return RunnerPayload.model_validate({**document, "action": operation.strip()})
    except PydanticValidationError:
        return None


class RunnerForwarder:
    """Calls the runner with auth, backoff and Retry-After handling."""

    def __init__(
        self,
        settings: RunnerSettings,
        http_client: httpx.AsyncClient,
        token_provider: TokenProvider,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """
        Initialize forwarder.

        Args:
            settings: Runner address and retry policy
            http_client: Shared async HTTP client (owned by the caller)
            token_provider: Bearer token source
            sleep: Backoff sleep override (tests)
        """
        self._settings = settings
        self._http = http_client
        self._token_provider = token_provider
        self._sleep = sleep

    def _base_url(self) -> str:
        base = self._settings.base_url
        if not base:
            raise ConfigurationError(
                "Runner pool endpoint is not configured",
                setting="RUNNER_POOL_ENDPOINT",
            )
        return base

    async def _post_once(
        self,
        url: str,
        session_id: str,
        content: bytes,
        correlation_id: str,
    ) -> httpx.Response:
        token = await self._token_provider.get_token()
        return await self._http.post(
            url,
            params={"identifier": session_id},
            content=content,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
                "x-corr": correlation_id,
            },
        )

    async def forward(
        self,
        operation: str,
        request_body: bytes,
        session_id: str,
    ) -> ForwardResult:
        """
        Forward one job request to the runner.

        Args:
            operation: compile / run / analyse
            request_body: Raw submitted JSON bytes
            session_id: Runner session identifier for this job

        Returns:
            ForwardResult: Runner response, ``400 invalid_json`` for an
            unusable body, or ``429 rate_limited`` after exhausting attempts

        Raises:
            ConfigurationError: Runner address unset
            TokenAcquisitionError: Bearer token could not be obtained
        """
        base = self._base_url()

        payload = build_payload(operation, request_body)
        if payload is None:
            logger.warning(
                f"{__name__}:forward - Request body is not a usable JSON object",
                extra={"operation": operation, "session_id": session_id},
            )
            return ForwardResult.error(400, "invalid_json")

        correlation_id = get_correlation_id() or new_correlation_id()
        url = f"{base}/runner"
        retrying = build_runner_retrying(self._settings, sleep=self._sleep)

        logger.info(
            f"{__name__}:forward - Calling runner",
            extra={
                "operation": operation,
                "session_id": session_id,
                "correlation_id": correlation_id,
            },
        )
        response = await retrying(
            self._post_once, url, session_id, payload.to_json_bytes(), correlation_id
        )
        attempts = retrying.statistics.get("attempt_number")

        if response is None:
            return ForwardResult.error(429, "rate_limited")

        result = ForwardResult(
            status_code=response.status_code,
            body=response.content,
            content_type=_media_type(response),
        )
        logger.info(
            f"{__name__}:forward - Runner responded",
            extra={
                "operation": operation,
                "session_id": session_id,
                "status_code": result.status_code,
                "attempts": attempts,
                "body": preview(result.body),
            },
        )
        return result

    async def ping(self) -> dict[str, Any]:
        """
        Authenticated health probe against ``{base}/healthstatus``.

        Never raises; failures are reported in the ``error`` field.

        Returns:
            dict: ``{url, status, elapsedMs, bodySnippet}`` or
            ``{url, elapsedMs, error, exception}``
        """
        base = self._settings.base_url
        if not base:
            return {"error": "RUNNER_POOL_ENDPOINT not set"}

        url = f"{base}/healthstatus"
        started = time.perf_counter()
        try:
            token = await self._token_provider.get_token()
            response = await self._http.get(
                url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
            )
        except Exception as e:
            logger.warning(
                f"{__name__}:ping - {type(e).__name__}: {e}",
                extra={"url": url},
            )
            return {
                "url": url,
                "elapsedMs": round((time.perf_counter() - started) * 1000),
                "error": "Runner ping failed",
                "exception": f"{type(e).__name__}: {e}",
            }

        return {
            "url": url,
            "status": response.status_code,
            "elapsedMs": round((time.perf_counter() - started) * 1000),
            "bodySnippet": clip_text(response.text, PING_SNIPPET_LIMIT),
        }
