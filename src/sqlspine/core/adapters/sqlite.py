"""SQLite database adapter."""

from __future__ import annotations

from typing import Any

from sqlspine.core.errors import DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module in autocommit mode with foreign-key
    enforcement switched on.  Suitable for:
    - Development and testing
    - Embedded, single-process applications
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            options={"readonly": readonly, **kwargs},
        )
        super().__init__(config)
        self._timeout = timeout

    def connect(self) -> None:
        """Connect to SQLite database."""
        import sqlite3

        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                uri=uri,
                isolation_level=None,
            )

            # Enable foreign keys
            self._conn.execute("PRAGMA foreign_keys = ON")

            if self._config.options.get("readonly"):
                self._conn.execute("PRAGMA query_only = ON")

        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def _begin(self, conn: Any) -> None:
        conn.execute("BEGIN")

    def _end(self, conn: Any) -> None:
        pass


__all__ = [
    "SQLiteAdapter",
]
