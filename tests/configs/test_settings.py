"""
Tests for environment-driven settings.

System role: Verification of configuration loading
"""

import pytest
from pydantic import ValidationError

from runner_gateway.configs.base import BaseSettings
from runner_gateway.configs.database import DatabaseSettings
from runner_gateway.configs.runner import RunnerSettings
from runner_gateway.configs.settings import Settings
from runner_gateway.configs.storage import StorageSettings


def test_runner_settings_from_environment(monkeypatch):
    monkeypatch.setenv("RUNNER_POOL_ENDPOINT", " https://pool.example.test/ ")
    monkeypatch.setenv("RUNNER_MAX_ATTEMPTS", "3")

    settings = RunnerSettings()

    assert settings.base_url == "https://pool.example.test"
    assert settings.max_attempts == 3


def test_runner_retry_defaults():
    settings = RunnerSettings(pool_endpoint="")

    assert settings.base_url == ""
    assert settings.max_attempts == 12
    assert settings.initial_backoff_seconds == 1.0
    assert settings.backoff_multiplier == 1.8
    assert settings.max_backoff_seconds == 12.0


def test_storage_settings_from_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_INPUT_BUCKET", "inputs")
    monkeypatch.setenv("STORAGE_MAX_RECEIVE_COUNT", "3")

    settings = StorageSettings()

    assert settings.input_bucket == "inputs"
    assert settings.max_receive_count == 3


def test_database_url_override_wins():
    settings = DatabaseSettings(url="sqlite+aiosqlite:///jobs.db", host="ignored")

    assert settings.async_database_url == "sqlite+aiosqlite:///jobs.db"


def test_database_url_is_built_from_parts():
    settings = DatabaseSettings(
        url=None, host="db.internal", port=6543, user="gw", password="pw", db="jobs",
        sslmode="require",
    )

    assert settings.async_database_url == (
        "postgresql+asyncpg://gw:pw@db.internal:6543/jobs?ssl=require"
    )


def test_is_sqlite_follows_url():
    assert DatabaseSettings(url="sqlite+aiosqlite:///:memory:").is_sqlite
    assert not DatabaseSettings(url=None, host="db.internal").is_sqlite


def test_log_level_is_normalised():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


@pytest.mark.parametrize("section", [RunnerSettings, StorageSettings, DatabaseSettings])
def test_sections_share_the_validated_base(section):
    assert issubclass(section, BaseSettings)

    with pytest.raises(ValidationError):
        section(log_level="chatty")
