"""
Runner backend configuration settings.

Settings for the remote execution backend (session pool) that compiles,
runs and analyses submitted code, plus the retry policy used to reach it.

Dependencies: pydantic, pydantic_settings
System role: Forwarder configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from runner_gateway.configs.base import BaseSettings


class RunnerSettings(BaseSettings):
    """Runner endpoint, authentication audience and retry policy."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RUNNER_",
        case_sensitive=False,
        extra="ignore",
    )

    pool_endpoint: str = Field(
        default="",
        description="Base address of the runner session pool (required)",
    )
    token_scope: str = Field(
        default="https://dynamicsessions.io/.default",
        description="Audience scope requested for the runner bearer token",
    )
    max_attempts: int = Field(default=12, description="Attempt ceiling per forward call")
    initial_backoff_seconds: float = Field(default=1.0, description="First backoff delay")
    backoff_multiplier: float = Field(
        default=1.8,
        description="Backoff growth factor applied after every transient outcome",
    )
    max_backoff_seconds: float = Field(default=12.0, description="Backoff delay cap")
    request_timeout_seconds: float = Field(
        default=120.0,
        description="Per-request HTTP timeout for runner calls",
    )

    @property
    def base_url(self) -> str:
        """
        Runner base address without a trailing slash.

        Returns:
            str: Normalised endpoint, empty when unset
        """
        return self.pool_endpoint.strip().rstrip("/")
