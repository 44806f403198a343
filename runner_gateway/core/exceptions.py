"""
Exception hierarchy for the Runner Gateway.

Provides layered exception structure for job intake, processing and
status retrieval. All exceptions include context for observability.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class RunnerGatewayException(Exception):
    """Base exception for all Runner Gateway errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RunnerGatewayException):
    """Raised when a required setting is missing or unusable."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message
            setting: Environment variable / setting that is missing
            details: Additional context
        """
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)


class ValidationError(RunnerGatewayException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class TokenAcquisitionError(RunnerGatewayException):
    """Raised when a bearer token for the runner cannot be obtained."""

    def __init__(
        self,
        message: str,
        scope: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if scope:
            details["scope"] = scope
        super().__init__(message, details)


class SubmissionError(RunnerGatewayException):
    """Raised when a job cannot be durably accepted."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize submission error.

        Args:
            message: Error message
            operation: Requested operation
            job_id: Identifier allocated for the job, if any
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        if job_id:
            details["job_id"] = job_id
        super().__init__(message, details)


class JobNotFoundError(RunnerGatewayException):
    """Raised when a job record cannot be found."""

    def __init__(
        self,
        operation: str,
        job_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize job not found error.

        Args:
            operation: Operation partition of the missing job
            job_id: ID of the missing job
            details: Additional context
        """
        details = details or {}
        details["operation"] = operation
        details["job_id"] = job_id
        self.operation = operation
        self.job_id = job_id
        super().__init__(f"Job not found: {operation}/{job_id}", details)


class MessageParseError(RunnerGatewayException):
    """Raised when a work message is structurally invalid."""

    def __init__(
        self,
        message: str,
        message_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if message_id:
            details["message_id"] = message_id
        super().__init__(message, details)
