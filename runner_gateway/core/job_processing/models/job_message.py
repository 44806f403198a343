"""
Work message and SQS event schemas.

The work message is a pointer to a job record, never a copy of job data.
SQSRecord / SQSEvent mirror the Lambda SQS trigger payload.

Dependencies: pydantic
System role: Data validation and contract definition for the work queue
"""

from pydantic import BaseModel, ConfigDict, Field

from runner_gateway.boundary.db.models.job_model import Operation


class WorkMessage(BaseModel):
    """Queue message body: ``{"operation": ..., "jobId": ...}``."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "operation": "run",
                "jobId": "0f8fad5bd9cb469fa16570867728950e",
            }
        },
    )

    operation: Operation
    job_id: str = Field(..., alias="jobId", min_length=1)

    def to_body(self) -> str:
        """Serialize for SQS."""
        return self.model_dump_json(by_alias=True)


class SQSRecord(BaseModel):
    """Single SQS record wrapper."""

    messageId: str
    receiptHandle: str
    body: str  # JSON string containing WorkMessage
    attributes: dict = {}
    messageAttributes: dict = {}
    md5OfBody: str = ""


class SQSEvent(BaseModel):
    """Complete SQS Lambda event."""

    Records: list[SQSRecord]
