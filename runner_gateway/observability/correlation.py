"""
Correlation id propagation.

One short id per HTTP request or per processed job, carried in a ContextVar
so it follows the asyncio task that owns the work. It is stamped onto every
log record by ``observability.logger`` and sent to the runner as ``x-corr``.

Dependencies: contextvars
System role: Tracing key shared by API, worker and runner calls
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

CORRELATION_ID_LENGTH = 12

_correlation_id: ContextVar[str] = ContextVar("runner_gateway_correlation_id", default="")


def new_correlation_id() -> str:
    """Random id of CORRELATION_ID_LENGTH hex characters."""
    return uuid.uuid4().hex[:CORRELATION_ID_LENGTH]


def get_correlation_id() -> str:
    """Id bound to the current context, empty outside any scope."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Bind a correlation id for the duration of a block.

    The previous value is restored on exit, so scopes nest and concurrent
    tasks never see each other's id.

    Args:
        correlation_id: Id to bind; a fresh one is generated when empty

    Yields:
        str: The bound id
    """
    value = (correlation_id or "").strip() or new_correlation_id()
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)
