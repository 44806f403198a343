"""HTTP request/response schemas."""

from runner_gateway.models.job import (
    JobAcceptedResponse,
    JobDiagnosticsResponse,
    JobStatusResponse,
)

__all__ = [
    "JobAcceptedResponse",
    "JobDiagnosticsResponse",
    "JobStatusResponse",
]
