"""Value conversion between entity fields and SQL.

Outbound, :func:`to_literal` renders a field value as an inline SQL literal
for CRUD statements and :func:`to_param` prepares a value for a bound
parameter.  Inbound, :func:`from_db` converts whatever the driver handed
back into the field's declared type.

Drivers are not consistent about result types: MySQL may hand back
``bytearray`` for numeric and text columns, SQLite returns timestamps as
strings and booleans as integers, Postgres returns ``numeric`` as
``Decimal``.  Every one of those paths ends in the declared Python type.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import DatabaseError
from sqlspine.core.meta import (
    FLOAT_KINDS,
    INT_KINDS,
    FieldDescription,
    set_value,
    zero_for_kind,
)

_TRUE_STRINGS = frozenset({"1", "true", "t", "y", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "n", "no", ""})
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def bool_to_db_bool(dialect: SchemaDialect, value: bool) -> str:
    """Boolean literal in the dialect's spelling."""
    return dialect.bool_literal(bool(value))


def db_bool_to_bool(raw: Any) -> bool:
    """Interpret a driver-returned boolean (``1``, ``"TRUE"``, ``b"1"``, ``True``...)."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float, Decimal)):
        return raw != 0
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")
    text = str(raw).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise DatabaseError(f"unrecognised boolean value from database: {raw!r}")


def time_to_formatted_string(dialect: SchemaDialect, value: datetime) -> str:
    """Timestamp literal body in the dialect's pattern (UTC)."""
    return dialect.format_timestamp(value)


def parse_timestamp(raw: Any) -> datetime:
    """Parse a driver-returned timestamp into an aware UTC datetime."""
    if isinstance(raw, datetime):
        value = raw
    else:
        text = str(raw).strip().replace("Z", "+00:00")
        value = datetime.fromisoformat(_LONG_FRACTION.sub(r"\1", text))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_literal(dialect: SchemaDialect, fd: FieldDescription, value: Any) -> str:
    """Render ``value`` as an inline SQL literal for the field's kind."""
    if value is None:
        return "NULL"
    kind = fd.kind
    if kind == "bool":
        return dialect.bool_literal(bool(value))
    if kind in INT_KINDS:
        return str(int(value))
    if kind in FLOAT_KINDS:
        return repr(float(value))
    if kind == "datetime":
        return dialect.string_literal(dialect.format_timestamp(value))
    return dialect.string_literal(str(value))


def zero_literal(dialect: SchemaDialect, fd: FieldDescription) -> str:
    return to_literal(dialect, fd, zero_for_kind(fd.kind))


def to_param(dialect: SchemaDialect, fd: FieldDescription, value: Any) -> Any:
    """Prepare a bound parameter value for the field's kind."""
    if value is None:
        return None
    if fd.kind == "bool" and dialect.bool_literal(True) == "1":
        return 1 if value else 0
    if fd.kind == "datetime" and isinstance(value, datetime):
        return dialect.format_timestamp(value)
    return value


def from_db(fd: FieldDescription, raw: Any) -> Any:
    """Convert a raw column value into the field's declared type."""
    if raw is None:
        return None if fd.optional else zero_for_kind(fd.kind)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8")

    kind = fd.kind
    if kind == "bool":
        return db_bool_to_bool(raw)
    if kind in INT_KINDS:
        if isinstance(raw, str):
            raw = raw.strip()
            return int(raw) if raw.lstrip("-").isdigit() else int(float(raw))
        return int(raw)
    if kind in FLOAT_KINDS:
        return float(raw)
    if kind == "datetime":
        return parse_timestamp(raw)
    return str(raw)


def populate_entity(entity: Any, fields: list[FieldDescription], row: dict[str, Any]) -> None:
    """Write a result row into the entity's persisted fields."""
    normalized = {str(k).lower(): v for k, v in row.items()}
    for fd in fields:
        if fd.no_db or fd.storage_name not in normalized:
            continue
        set_value(entity, fd, from_db(fd, normalized[fd.storage_name]))


__all__ = [
    "bool_to_db_bool",
    "db_bool_to_bool",
    "time_to_formatted_string",
    "parse_timestamp",
    "to_literal",
    "zero_literal",
    "to_param",
    "from_db",
    "populate_entity",
]
