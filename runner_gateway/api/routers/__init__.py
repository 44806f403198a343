"""API routers."""

from .diagnostics import router as diagnostics_router
from .health import router as health_router
from .jobs import router as jobs_router
from .operations import router as operations_router

__all__ = [
    "diagnostics_router",
    "health_router",
    "jobs_router",
    "operations_router",
]
