"""
Process settings.

One ``Settings`` object bundles the runner, storage and database sections.
Sections are built when Settings is instantiated (not at import), so tests
can monkeypatch the environment before the first ``get_settings()`` call.

Dependencies: pydantic, pydantic_settings
System role: Central configuration aggregator for API and workers
"""

from functools import lru_cache

from pydantic import Field

from runner_gateway.configs.base import BaseSettings
from runner_gateway.configs.database import DatabaseSettings
from runner_gateway.configs.runner import RunnerSettings
from runner_gateway.configs.storage import StorageSettings


class Settings(BaseSettings):
    """Runner, storage and database settings of one process."""

    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings, read from the environment once.

    Usage:
        from runner_gateway.configs import get_settings
        endpoint = get_settings().runner.base_url
    """
    return Settings()
