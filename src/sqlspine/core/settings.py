"""Environment-driven settings for opening a sqlspine engine.

``SqlSpineSettings`` gathers everything needed to reach a database and to
tune the engine's logging: the backend name, connection coordinates, and the
two tracing switches that become :class:`~sqlspine.core.engine.EngineOptions`.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    The engine itself never reads the environment; settings are resolved
    once and passed in.

    - **Pydantic validation:** Type-checked at startup, not at first query
    - **Environment-driven:** ``SQLSPINE_*`` env vars and ``.env`` files
    - **Sensible defaults:** an in-memory SQLite database out of the box

Examples:
    >>> from sqlspine.core.settings import SqlSpineSettings
    >>> s = SqlSpineSettings(db_type="postgres", host="db", database="app")
    >>> s.adapter_kwargs()["host"]
    'db'

Tags:
    settings, configuration, pydantic, environment, sqlspine
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DB_TYPES = ("postgres", "mysql", "sqlite", "mssql", "hdb")

_DEFAULT_PORTS = {
    "postgres": 5432,
    "mysql": 3306,
    "mssql": 1433,
    "hdb": 30015,
}


class SqlSpineSettings(BaseSettings):
    """Connection and tracing settings.

    Fields
    ──────
    db_type        : Backend name (postgres, mysql, sqlite, mssql, hdb)
    path           : SQLite database file (``:memory:`` by default)
    host/port      : Server coordinates for networked backends
    database       : Database (or schema) name
    username       : Login name
    password       : Login password
    log_level      : Structlog log level
    log_schema     : Log every SchemaBuildResult the engine produces
    log_statements : Log every SQL statement the engine executes
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Backend ──────────────────────────────────────────────────
    db_type: str = "sqlite"

    # ── Connection ───────────────────────────────────────────────
    path: str = ":memory:"
    host: str = "localhost"
    port: int | None = None
    database: str = ""
    username: str | None = None
    password: str | None = None
    driver_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra keyword arguments passed to the adapter",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_schema: bool = False
    log_statements: bool = False

    @field_validator("db_type")
    @classmethod
    def _normalize_db_type(cls, value: str) -> str:
        from sqlspine.core.dialect import canonical_name

        name = canonical_name(value)
        if name not in _DB_TYPES:
            raise ValueError(f"unsupported db_type {value!r}; expected one of {_DB_TYPES}")
        return name

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def adapter_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the adapter registered under ``db_type``."""
        if self.db_type == "sqlite":
            return {"path": self.path, **self.driver_options}
        return {
            "host": self.host,
            "port": self.port or _DEFAULT_PORTS[self.db_type],
            "database": self.database,
            "username": self.username,
            "password": self.password,
            **self.driver_options,
        }

    def engine_options(self):
        """Engine tracing switches derived from these settings."""
        from sqlspine.core.engine import EngineOptions

        return EngineOptions(log_schema=self.log_schema, log_statements=self.log_statements)


__all__ = ["SqlSpineSettings"]
