"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_diagnostics_service,
    get_job_status_reader,
    get_job_submitter,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "ServiceCache",
    "get_diagnostics_service",
    "get_job_status_reader",
    "get_job_submitter",
    "get_service_cache",
    "get_settings_dependency",
]
