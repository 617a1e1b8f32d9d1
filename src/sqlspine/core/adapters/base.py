"""Database adapter base class.

Manifesto:
    The engine consumes four primitives from its connection collaborator:
    ``execute``, ``query_one``, ``query`` and ``name``.  Adapters provide
    them on top of one DB-API connection per backend, so the engine never
    depends on a specific driver.

Features:
    - Abstract ``connect()`` / ``disconnect()`` per driver
    - Cursor-based ``execute()``, ``query()``, ``query_one()``
    - Result rows as dicts with lower-cased column names
    - Context-manager protocol for connection lifecycle

Tags:
    sqlspine, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlspine.core.protocols import Connection, Row

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses open exactly one connection in ``connect()`` and run it in
    autocommit mode; every statement the engine issues is its own
    transaction unless the caller wraps work in :meth:`transaction`.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._conn: Any = None

    @property
    def name(self) -> str:
        """Canonical backend name, matching the dialect registry."""
        return self._config.db_type.value

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    def disconnect(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_connection(self) -> Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Run the enclosed statements as one transaction."""
        conn = self.get_connection()
        self._begin(conn)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._end(conn)

    def _begin(self, conn: Any) -> None:
        conn.autocommit = False

    def _end(self, conn: Any) -> None:
        conn.autocommit = True

    # -- Executor primitives -------------------------------------------------

    def _cursor(self) -> Any:
        return self.get_connection().cursor()

    def _run(self, cursor: Any, sql: str, params: Sequence[Any]) -> None:
        if params:
            cursor.execute(sql, tuple(params))
        else:
            cursor.execute(sql)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute SQL statement."""
        cursor = self._cursor()
        try:
            self._run(cursor, sql, params)
            return cursor.rowcount
        finally:
            cursor.close()

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        """Execute query and return results as dicts."""
        cursor = self._cursor()
        try:
            self._run(cursor, sql, params)
            if cursor.description is None:
                return []
            columns = [str(desc[0]).lower() for desc in cursor.description]
            return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Row | None:
        """Execute query and return the first row."""
        results = self.query(sql, params)
        return results[0] if results else None

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
