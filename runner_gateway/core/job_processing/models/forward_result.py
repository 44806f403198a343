"""
Runner call result and request payload models.

Dependencies: pydantic
System role: Contract between the forwarder, the runner and the worker
"""

import json

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_CONTENT_TYPE = "application/json"


class ForwardResult(BaseModel):
    """Outcome of one forward call. Error statuses are data, not exceptions."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(description="Runner (or synthetic) HTTP status")
    body: bytes = Field(default=b"", description="Raw response body")
    content_type: str = Field(default=DEFAULT_CONTENT_TYPE, description="Media type")

    @classmethod
    def error(cls, status_code: int, code: str) -> "ForwardResult":
        """Synthetic result carrying ``{"error": code}``."""
        return cls(
            status_code=status_code,
            body=json.dumps({"error": code}).encode("utf-8"),
            content_type=DEFAULT_CONTENT_TYPE,
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_json(self) -> bool:
        """True for ``application/json`` and ``+json`` media types."""
        media_type = self.content_type.split(";", 1)[0].strip().lower()
        return media_type == "application/json" or media_type.endswith("+json")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class RunnerPayload(BaseModel):
    """
    Whitelisted request forwarded to the runner.

    Unknown fields in the submitted body are dropped; missing fields are
    sent as null. ``action`` always carries the operation.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    action: str
    code: str | None = None
    language_version: str | None = None
    candidate_id: str | None = None
    candidate_name: str | None = None
    candidate_email: str | None = None
    assignment_id: str | None = None
    assignment_name: str | None = None

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
