"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from runner_gateway.configs.database import DatabaseSettings
from runner_gateway.configs.runner import RunnerSettings
from runner_gateway.configs.settings import Settings, get_settings
from runner_gateway.configs.storage import StorageSettings

__all__ = [
    "DatabaseSettings",
    "RunnerSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
