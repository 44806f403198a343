"""
Job record store settings.

PostgreSQL (asyncpg) in deployment; any SQLAlchemy async URL, typically
``sqlite+aiosqlite``, when ``POSTGRES_URL`` is set.

Dependencies: pydantic, pydantic_settings, sqlalchemy
System role: Database connection configuration for the record store
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from runner_gateway.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Connection and pool settings for the jobs table."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Complete async URL; when set, host/port/user/... are ignored",
    )
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="runnergateway")
    sslmode: str = Field(default="require", description="'require' enables TLS for asyncpg")

    pool_size: int = Field(default=5, description="Persistent connections per engine")
    max_overflow: int = Field(default=10, description="Burst connections above pool_size")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a free connection")
    echo_sql: bool = Field(default=False)

    @property
    def async_database_url(self) -> str:
        """
        SQLAlchemy async URL for the record store.

        Credentials are escaped by SQLAlchemy's URL builder.

        Returns:
            str: ``url`` if configured, else a ``postgresql+asyncpg`` URL
        """
        if self.url:
            return self.url
        query = {"ssl": "require"} if self.sslmode == "require" else {}
        return URL.create(
            "postgresql+asyncpg",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.db,
            query=query,
        ).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        """True when the configured URL targets SQLite (no connection pool options)."""
        return make_url(self.async_database_url).get_backend_name() == "sqlite"
