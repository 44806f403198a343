"""
Request context middleware.

Binds the caller's ``X-Correlation-ID`` (or a generated one) for the whole
request, echoes it on the response and writes one access line per request.

Dependencies: starlette, runner_gateway.observability
System role: Request/response observability injection
"""

import logging
from time import perf_counter

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from runner_gateway.observability.correlation import correlation_scope

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlation scope and access logging around every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = perf_counter()
        route = f"{request.method} {request.url.path}"

        with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.exception(
                    f"{__name__}:dispatch - {route} failed: {type(e).__name__}",
                    extra={"elapsed_ms": _elapsed_ms(started)},
                )
                raise

            logger.info(
                f"{__name__}:dispatch - {route} {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "elapsed_ms": _elapsed_ms(started),
                },
            )

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000, 2)
