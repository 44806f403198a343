"""
Runner Gateway HTTP application.

Exposes the submit endpoints (/run, /compile, /analyse), job status lookup,
and health and diagnostics probes under ``/api/v1``.

Dependencies: fastapi, uvicorn, runner_gateway.api.routers
System role: API entry point
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runner_gateway.api.deps.dependencies import get_service_cache
from runner_gateway.boundary.db import dispose_async_engine
from runner_gateway.configs import get_settings
from runner_gateway.observability.logger import configure_logging
from runner_gateway.observability.middleware import CORRELATION_HEADER, RequestContextMiddleware
from .routers import (
    diagnostics_router,
    health_router,
    jobs_router,
    operations_router,
)

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the AWS/runner clients before serving."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)

    cache = get_service_cache()
    # Fail at startup, not on the first request, if a client cannot be built
    cache.job_submitter
    cache.forwarder
    logger.info(
        f"{__name__}:lifespan - Clients ready",
        extra={"environment": settings.environment},
    )

    yield

    await cache.aclose()
    await dispose_async_engine()
    logger.info(f"{__name__}:lifespan - Clients closed")


def create_app() -> FastAPI:
    """
    Build the application.

    Returns:
        FastAPI: App with middleware and all routers under /api/v1
    """
    app = FastAPI(
        title="Runner Gateway API",
        description="Asynchronous compile / run / analyse jobs against a remote runner",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["Location", CORRELATION_HEADER],
    )

    for router in (operations_router, jobs_router, health_router, diagnostics_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("runner_gateway.api.main:app", host="0.0.0.0", port=8000)
