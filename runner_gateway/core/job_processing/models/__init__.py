"""
Models for job processing.

Exports: WorkMessage, SQSRecord, SQSEvent, ForwardResult, RunnerPayload
"""

from .forward_result import DEFAULT_CONTENT_TYPE, ForwardResult, RunnerPayload
from .job_message import SQSEvent, SQSRecord, WorkMessage

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "ForwardResult",
    "RunnerPayload",
    "SQSEvent",
    "SQSRecord",
    "WorkMessage",
]
