"""
Core business logic module.

Contains the exception hierarchy and the job processing engine
(forwarder, retry policy, worker).
"""

from runner_gateway.core.exceptions import (
    ConfigurationError,
    JobNotFoundError,
    MessageParseError,
    RunnerGatewayException,
    SubmissionError,
    TokenAcquisitionError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "JobNotFoundError",
    "MessageParseError",
    "RunnerGatewayException",
    "SubmissionError",
    "TokenAcquisitionError",
    "ValidationError",
]
