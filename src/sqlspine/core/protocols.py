"""
Structural protocols shared across sqlspine.

Manifesto:
    The engine never talks to a DB-API connection directly.  It consumes
    exactly four primitives from its connection collaborator, described
    here as :class:`Executor`.  Any object of that shape works: the
    bundled adapters, a test double recording statements, or a caller's
    own wrapper around an existing connection.

Tags:
    protocol, typing, structural-subtyping, executor, sqlspine
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]


@runtime_checkable
class Executor(Protocol):
    """The connection collaborator consumed by the engine.

    ``params`` use the placeholder style of the backend's dialect
    (``%s`` or ``?``); an empty sequence means the statement carries no
    placeholders.
    """

    @property
    def name(self) -> str:
        """Backend-identifying name (``postgres``, ``mysql``, ``sqlite``, ``mssql``, ``hdb``)."""
        ...

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Run a statement, discarding any result set."""
        ...

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Row | None:
        """Run a statement and return its first row, or ``None``."""
        ...

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        """Run a statement and return every row."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal DB-API connection shape used by the adapters."""

    def cursor(self) -> Any: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


__all__ = ["Executor", "Connection", "Row"]
