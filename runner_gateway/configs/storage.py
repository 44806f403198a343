"""
Durable storage configuration.

Settings for the job input/output buckets and the SQS work queue with its
poison (dead-letter) queue.

Dependencies: pydantic, pydantic_settings
System role: S3 and SQS configuration for job intake and processing
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from runner_gateway.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """Settings for job blobs and the work queue."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(
        default="eu-west-1",
        description="AWS region for buckets and queues",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom AWS endpoint (e.g. LocalStack); None for real AWS",
    )
    input_bucket: str = Field(default="job-input", description="Bucket for request bodies")
    output_bucket: str = Field(default="job-output", description="Bucket for runner results")
    jobs_queue: str = Field(default="jobs", description="Work queue name")
    poison_queue: str = Field(default="jobs-poison", description="Dead-letter queue name")
    max_receive_count: int = Field(
        default=5,
        description="Deliveries before a message is moved to the poison queue",
    )
    receive_wait_seconds: int = Field(
        default=20,
        description="Long-poll wait used by the local queue poller",
    )
    visibility_timeout_seconds: int = Field(
        default=300,
        description="Visibility timeout for the work queue (covers the full retry window)",
    )
