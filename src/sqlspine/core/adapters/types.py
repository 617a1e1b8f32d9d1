"""Database types and connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DatabaseType(str, Enum):
    """Supported database types (values are canonical dialect names)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    MSSQL = "mssql"
    HDB = "hdb"


@dataclass
class DatabaseConfig:
    """
    Configuration for one database connection.

    Different fields are used by different database types.
    """

    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # Networked backends
    host: str = "localhost"
    port: int = 0
    database: str = ""
    username: str | None = None
    password: str | None = None

    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
