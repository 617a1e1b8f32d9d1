"""Small helpers for reading catalog answers through an Executor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlspine.core.protocols import Executor


def scalar(executor: Executor, sql: str, params: Sequence[Any] = (), column: str = "n") -> Any:
    """First column value of the first row, or ``None`` when no row comes back."""
    row = executor.query_one(sql, params)
    if row is None:
        return None
    if column in row:
        return row[column]
    return next(iter(row.values()), None)


def exists(executor: Executor, query: tuple[str, Sequence[Any]]) -> bool:
    """Answer a ``SELECT COUNT(*) AS n`` catalog query as a boolean."""
    sql, params = query
    value = scalar(executor, sql, params)
    return bool(value) and int(value) > 0


__all__ = ["scalar", "exists"]
