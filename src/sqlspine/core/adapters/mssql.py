"""SQL Server database adapter.

Uses ``pyodbc`` with an ODBC driver for SQL Server.  pyodbc uses
**qmark** (``?``) placeholder style.

Install the driver::

    pip install pyodbc
    # or:  pip install sqlspine[mssql]
"""

from __future__ import annotations

from typing import Any

from sqlspine.core.errors import ConfigError, DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class MSSQLAdapter(DatabaseAdapter):
    """SQL Server database adapter (single autocommit ODBC connection)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 1433,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        driver: str = "ODBC Driver 18 for SQL Server",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MSSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            options={"driver": driver, **kwargs},
        )
        super().__init__(config)

    def connection_string(self) -> str:
        c = self._config
        options = dict(c.options)
        parts = [
            f"DRIVER={{{options.pop('driver')}}}",
            f"SERVER={c.host},{c.port}",
            f"DATABASE={c.database}",
        ]
        if c.username:
            parts.append(f"UID={c.username}")
            parts.append(f"PWD={c.password or ''}")
        parts.extend(f"{key}={value}" for key, value in options.items())
        return ";".join(parts)

    def connect(self) -> None:
        """Connect to SQL Server."""
        try:
            import pyodbc
        except ImportError:
            raise ConfigError(
                "pyodbc is required for SQL Server. Install with: pip install pyodbc"
            ) from None

        try:
            self._conn = pyodbc.connect(
                self.connection_string(),
                autocommit=True,
                timeout=self._config.connect_timeout,
            )
        except pyodbc.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQL Server: {e}",
                cause=e,
            ) from e


__all__ = [
    "MSSQLAdapter",
]
