"""Service settings loaded from environment variables.

Each group reads its own prefix:

- `DB_`: store connection (`DB_DIALECT`, `DB_HOST`, `DB_USER`, ...)
- `PAGINATION_`: page size defaults and the per-call timeout
- `LOG_`: logging level
- `SERVER_`: listen address of the RPC server
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class DatabaseSettings(BaseSettings):
    """Store connection settings.

    `sqlite_path` is used only when `dialect` is `sqlite`; the network
    fields are used by `postgres` and `mysql`.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_", env_file=".env", extra="ignore", case_sensitive=False
    )

    dialect: Literal["sqlite", "postgres", "mysql"] = Field(
        default="mysql", description="SQL dialect and driver family."
    )
    host: str = Field(default="db", min_length=1, description="Database host.")
    port: int = Field(default=3306, ge=1, le=65535, description="Database port.")
    user: str = Field(default="root", min_length=1, description="Database user.")
    password: SecretStr = Field(
        default=SecretStr("example"), description="Database password."
    )
    name: str = Field(default="platform", min_length=1, description="Database name.")
    sqlite_path: str = Field(
        default=":memory:", description="SQLite database file (sqlite dialect only)."
    )
    pool_size: int = Field(
        default=5, ge=1, le=100, description="Most connections the pool opens."
    )
    pool_timeout: Optional[float] = Field(
        default=10.0,
        gt=0,
        description="Seconds a query waits for a free pooled connection.",
    )
    auto_schema: bool = Field(
        default=False,
        description="Create entity tables and sort indexes at startup.",
    )


class PaginationSettings(BaseSettings):
    """Page size limits and the per-call store timeout."""

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_", env_file=".env", extra="ignore", case_sensitive=False
    )

    default_limit: int = Field(
        default=50, ge=1, le=10_000, description="Page size when the request sets none."
    )
    max_limit: int = Field(
        default=1000, ge=1, le=10_000, description="Largest page size served."
    )
    request_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds before an in-flight page query is cancelled.",
    )

    @model_validator(mode="after")
    def _check_limits(self) -> PaginationSettings:
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", extra="ignore", case_sensitive=False
    )

    level: LogLevel = Field(default="INFO", description="Root logging level.")


class ServerSettings(BaseSettings):
    """RPC server listen address."""

    model_config = SettingsConfigDict(
        env_prefix="SERVER_", env_file=".env", extra="ignore", case_sensitive=False
    )

    host: str = Field(default="0.0.0.0", description="Bind address.")
    port: int = Field(default=50051, ge=1, le=65535, description="Listen port.")


class Settings(BaseSettings):
    """All service settings."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""

    return Settings()
