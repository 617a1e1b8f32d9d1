"""Dialect-aware schema builder.

Turns an entity's FieldDescription list into a :class:`SchemaBuildResult`:
the CREATE TABLE text plus every auxiliary artifact the table needs once it
exists (sequence starts, indexes, foreign keys).  Building is pure; nothing
is executed here.  The migration engine decides what to run.

Per field, in declaration order:

1. skip fields marked not persisted;
2. resolve the column type through the dialect's type map (an unmapped
   type is a fatal :class:`UnsupportedFieldTypeError`);
3. apply each annotation pair in the order it was written.

Column clauses are emitted as ``<name> <type> [increment] [DEFAULT ...]
[NOT NULL] [UNIQUE]`` so the same clause can be reused verbatim by
ALTER TABLE ... ADD COLUMN.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import ConfigError, UnsupportedFieldTypeError
from sqlspine.core.meta import FieldDescription, extract_fields
from sqlspine.core.naming import foreign_key_name, index_name

_FKEY_SPEC = re.compile(r"^\s*(\w+)\s*\(\s*(\w+)\s*\)\s*$")


@dataclass
class IndexSpec:
    """Index definition; ``columns`` keeps field-declaration order."""

    table: str
    unique: bool
    columns: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SequenceSpec:
    """Pending start value for a table's incrementing key."""

    table: str
    column: str
    start: int | None = None


@dataclass(frozen=True)
class ForeignKeySpec:
    from_table: str
    from_field: str
    ref_table: str
    ref_field: str

    @property
    def name(self) -> str:
        return foreign_key_name(self.from_table, self.ref_table, self.ref_field)


@dataclass(frozen=True)
class ColumnSpec:
    """A resolved column: the field, its full DDL clause and its default clause."""

    field: FieldDescription
    clause: str
    default_clause: str | None = None


@dataclass
class SchemaBuildResult:
    table: str
    create_sql: str
    fields: list[FieldDescription]
    columns: list[ColumnSpec]
    sequences: list[SequenceSpec] = field(default_factory=list)
    indexes: dict[str, IndexSpec] = field(default_factory=dict)
    foreign_keys: list[ForeignKeySpec] = field(default_factory=list)
    primary_keys: list[str] = field(default_factory=list)

    def column(self, storage_name: str) -> ColumnSpec | None:
        for col in self.columns:
            if col.field.storage_name == storage_name:
                return col
        return None

    def log_to(self, logger: Any) -> None:
        """Emit this result as a single ``schema_built`` event."""
        logger.info(
            "schema_built",
            table=self.table,
            create_sql=self.create_sql,
            fields=[
                {"name": fd.name, "column": fd.storage_name, "type": fd.column_type}
                for fd in self.fields
            ],
            sequences=[(s.column, s.start) for s in self.sequences],
            indexes={
                name: {"unique": spec.unique, "columns": list(spec.columns)}
                for name, spec in self.indexes.items()
            },
            foreign_keys=[fk.name for fk in self.foreign_keys],
            primary_keys=list(self.primary_keys),
        )


def parse_foreign_key(table: str, column: str, spec: str) -> ForeignKeySpec:
    """Parse an ``fkey:<reftable>(<reffield>)`` annotation value."""
    match = _FKEY_SPEC.match(spec)
    if match is None:
        raise ConfigError(
            f"invalid fkey annotation {spec!r} on {table}.{column}; "
            "expected fkey:<reftable>(<reffield>)"
        )
    return ForeignKeySpec(table, column, match.group(1), match.group(2))


class SchemaBuilder:
    """Builds CREATE TABLE schemas for one dialect."""

    def __init__(self, dialect: SchemaDialect):
        self._dialect = dialect

    @property
    def dialect(self) -> SchemaDialect:
        return self._dialect

    def build(self, table: str, entity: Any) -> SchemaBuildResult:
        d = self._dialect
        fields: list[FieldDescription] = []
        columns: list[ColumnSpec] = []
        sequences: list[SequenceSpec] = []
        indexes: dict[str, IndexSpec] = {}
        foreign_keys: list[ForeignKeySpec] = []
        primary_keys: list[str] = []
        increment_keys: list[str] = []

        for fd in extract_fields(entity):
            if fd.no_db:
                continue

            increment = fd.is_increment
            column_type = d.column_type(fd.kind, increment=increment) if fd.kind else None
            if column_type is None:
                raise UnsupportedFieldTypeError(
                    fd.name, fd.type_name, backend=d.name
                ).with_context(table=table)

            start: int | None = None
            default: str | None = None
            not_null = False
            unique = False

            for attr in fd.attributes:
                match attr.name:
                    case "primary_key":
                        primary_keys.append(fd.storage_name)
                    case "start":
                        start = _parse_start(table, fd, attr.value)
                    case "default":
                        default = d.default_clause(fd.kind, attr.value)
                    case "nullable":
                        not_null = attr.value == "false"
                    case "constraint":
                        unique = attr.value == "unique"
                    case "index":
                        _add_index(indexes, table, fd.storage_name, attr.value)
                    case "fkey":
                        foreign_keys.append(parse_foreign_key(table, fd.storage_name, attr.value))
                    case _:
                        pass

            parts = [d.quote_identifier(fd.storage_name), column_type]
            if increment:
                increment_keys.append(fd.storage_name)
                sequences.append(SequenceSpec(table, fd.storage_name, start))
                clause = d.increment_clause(start)
                if clause:
                    parts.append(clause)
            if default is not None:
                parts.append(default)
            if not_null:
                parts.append("NOT NULL")
            if unique:
                parts.append("UNIQUE")

            resolved = replace(fd, column_type=column_type)
            fields.append(resolved)
            columns.append(ColumnSpec(resolved, " ".join(parts), default))

        if len(increment_keys) > 1:
            raise ConfigError(
                f"table {table!r} declares more than one incrementing key: {increment_keys}"
            )

        clauses = [col.clause for col in columns]
        if primary_keys:
            if increment_keys and d.inline_increment_key:
                if len(primary_keys) > 1:
                    raise ConfigError(
                        f"table {table!r}: an incrementing key cannot be part of a "
                        f"composite primary key on {d.name}"
                    )
            else:
                clauses.append(d.primary_key_clause(table, primary_keys))

        return SchemaBuildResult(
            table=table,
            create_sql=d.create_table(table, clauses),
            fields=fields,
            columns=columns,
            sequences=sequences,
            indexes=indexes,
            foreign_keys=foreign_keys,
            primary_keys=primary_keys,
        )


def _parse_start(table: str, fd: FieldDescription, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(
            f"invalid start value {value!r} on {table}.{fd.storage_name}"
        ) from None


def _add_index(indexes: dict[str, IndexSpec], table: str, column: str, value: str) -> None:
    if value in ("unique", "non-unique"):
        name = index_name(table, column)
        spec = indexes.setdefault(name, IndexSpec(table, value == "unique"))
    else:
        # named composite index; columns accumulate in declaration order
        spec = indexes.setdefault(value, IndexSpec(table, False))
    spec.columns.append(column)


__all__ = [
    "IndexSpec",
    "SequenceSpec",
    "ForeignKeySpec",
    "ColumnSpec",
    "SchemaBuildResult",
    "SchemaBuilder",
    "parse_foreign_key",
]
