"""
Retry policy for runner calls.

Tenacity-based exponential backoff that honours server-directed
``Retry-After`` timing for rate limiting and gateway errors.

- Transport failures and 429/502/503/504 responses are transient
- Backoff starts at 1 s and grows by 1.8x per transient outcome, capped at 12 s
- A positive ``Retry-After`` (delta seconds or HTTP date) replaces the backoff
  for that sleep, even when it is longer
- Anything else (including token acquisition failure) is not retried

Dependencies: httpx, tenacity
System role: Resilience layer of the forwarder
"""

import email.utils
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from runner_gateway.configs.runner import RunnerSettings

logger = logging.getLogger(__name__)

TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Convert a Retry-After header value into a delay in seconds.

    Args:
        value: Header value, either delta seconds or an HTTP date

    Returns:
        Delay in seconds when strictly positive, otherwise None
    """
    if not value:
        return None
    value = value.strip()
    try:
        delay = float(int(value))
    except ValueError:
        try:
            dt = email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        delay = (dt - datetime.now(timezone.utc)).total_seconds()
    if delay <= 0:
        return None
    return delay


def is_transient_response(response: httpx.Response) -> bool:
    return response.status_code in TRANSIENT_STATUSES


class RetryAfterOrBackoff(wait_base):
    """Wait strategy that honours Retry-After before falling back to backoff."""

    def __init__(self, fallback_wait: wait_base) -> None:
        self._fallback_wait = fallback_wait

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self._retry_after_delay(retry_state)
        if delay is not None:
            return delay
        return float(self._fallback_wait(retry_state))

    def _retry_after_delay(self, retry_state: RetryCallState) -> Optional[float]:
        outcome = retry_state.outcome
        if outcome is None or outcome.failed:
            return None
        response = outcome.result()
        headers = getattr(response, "headers", None)
        if headers is None:
            return None
        return parse_retry_after(headers.get("Retry-After"))


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    sleep = retry_state.next_action.sleep if retry_state.next_action else None
    if outcome is not None and outcome.failed:
        exc = outcome.exception()
        reason = f"{type(exc).__name__}: {exc}"
    else:
        reason = f"HTTP {outcome.result().status_code}" if outcome else "unknown"
    logger.warning(
        f"{__name__}:retry - Transient runner outcome, backing off",
        extra={
            "attempt": retry_state.attempt_number,
            "reason": reason,
            "sleep_seconds": sleep,
        },
    )


def _exhausted(retry_state: RetryCallState) -> None:
    logger.error(
        f"{__name__}:retry - Attempts exhausted",
        extra={"attempts": retry_state.attempt_number},
    )
    return None


def build_runner_retrying(
    settings: RunnerSettings,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> AsyncRetrying:
    """
    Create the async retry controller for one forward call.

    On exhaustion the controller returns None instead of raising; the
    forwarder maps that to its synthetic rate-limited result.

    Args:
        settings: Runner retry settings
        sleep: Awaitable sleep override (tests)

    Returns:
        AsyncRetrying: Controller to call as ``await retrying(fn, *args)``
    """
    wait_strategy = RetryAfterOrBackoff(
        fallback_wait=wait_exponential(
            multiplier=settings.initial_backoff_seconds,
            exp_base=settings.backoff_multiplier,
            max=settings.max_backoff_seconds,
        ),
    )
    kwargs = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return AsyncRetrying(
        stop=stop_after_attempt(settings.max_attempts),
        wait=wait_strategy,
        retry=(
            retry_if_exception_type(httpx.TransportError)
            | retry_if_result(is_transient_response)
        ),
        before_sleep=_log_retry,
        retry_error_callback=_exhausted,
        **kwargs,
    )
