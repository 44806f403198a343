"""
Job API models and schemas.

Response schemas for job intake and status polling. Field names are
camelCase on the wire.

Dependencies: pydantic
System role: Job HTTP API contracts
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JobAcceptedResponse(_CamelModel):
    """Response schema for an accepted submission (202)."""

    job_id: str = Field(description="Job identifier (32 hex chars)")
    operation: str = Field(description="compile, run or analyse")
    status_url: str = Field(description="Relative URL to poll for status")


class JobDiagnosticsResponse(_CamelModel):
    """Processing details returned with ``debug=true``."""

    last_step: str | None = None
    attempts: int = 0
    last_http_status: int | None = None
    last_content_type: str | None = None
    runner_snippet: str | None = None
    created_at: datetime
    updated_at: datetime


class JobStatusResponse(_CamelModel):
    """Response schema for job status without raw output."""

    job_id: str
    operation: str
    status: str
    error: str | None = None
    output_ref: str | None = None
    warning: str | None = None
    diagnostics: JobDiagnosticsResponse | None = None
