"""Create, update, delete and fetch single entities.

Every write ends the same way: the entity is reset to its zero state and
the stored row is read back into it by primary key.  Defaults applied by the
database and keys assigned by it therefore show up in the entity, and fields
that are not persisted always come back as zero.

Value policy for a persisted non-key field, first match wins:

1. the incrementing key gets the backend's auto-assign placeholder
   (or is left out of the INSERT);
2. a zero value on a field with a declared default gets the backend's
   "use default" placeholder on INSERT, and the default expression on UPDATE;
3. a missing value on a NOT NULL field gets the type's zero literal;
4. anything else is written as a literal of its declared type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import EntityNotFoundError, FrozenEntityError, MissingPrimaryKeyError
from sqlspine.core.logging import get_logger
from sqlspine.core.meta import (
    FieldDescription,
    entity_class,
    frozen_part,
    extract_fields,
    get_value,
    is_zero,
    reset_entity,
)
from sqlspine.core.naming import table_name_for
from sqlspine.core.protocols import Executor
from sqlspine.core.sequences import SequenceManager
from sqlspine.core.values import populate_entity, to_literal, zero_literal

logger = get_logger(__name__)


class CrudMode(str, Enum):
    CREATE = "C"
    UPDATE = "U"
    DELETE = "D"
    GET = "G"


@dataclass
class CrudContext:
    """Per-call state of one CRUD operation."""

    entity: Any
    mode: CrudMode
    table: str
    fields: list[FieldDescription]
    columns: list[str] = field(default_factory=list)
    values: list[str] = field(default_factory=list)
    keys: dict[str, Any] = field(default_factory=dict)
    increment_key: str | None = None


class CrudEngine:
    """Single-entity persistence on top of an executor."""

    def __init__(self, executor: Executor, dialect: SchemaDialect, sequences: SequenceManager):
        self._executor = executor
        self._dialect = dialect
        self._sequences = sequences

    # -- Operations --------------------------------------------------------

    def create(self, entity: Any) -> Any:
        ctx = self.build_context(entity, CrudMode.CREATE)
        generated = self._sequences.insert(ctx.table, ctx.columns, ctx.values, ctx.increment_key)
        if ctx.increment_key is not None:
            ctx.keys[ctx.increment_key] = generated
        logger.debug("entity_created", table=ctx.table, keys=ctx.keys)
        return self._reload(ctx)

    def update(self, entity: Any) -> Any:
        ctx = self.build_context(entity, CrudMode.UPDATE)
        if ctx.columns:
            assignments = ", ".join(f"{c} = {v}" for c, v in zip(ctx.columns, ctx.values))
            self._executor.execute(
                f"UPDATE {ctx.table} SET {assignments}{self._where(ctx)};"
            )
        logger.debug("entity_updated", table=ctx.table, keys=ctx.keys)
        return self._reload(ctx)

    def delete(self, entity: Any) -> None:
        ctx = self.build_context(entity, CrudMode.DELETE)
        self._executor.execute(f"DELETE FROM {ctx.table}{self._where(ctx)};")
        logger.debug("entity_deleted", table=ctx.table, keys=ctx.keys)

    def get_entity(self, entity: Any) -> Any:
        """Populate ``entity`` from the row matching its primary-key values."""
        ctx = self.build_context(entity, CrudMode.GET)
        return self._reload(ctx)

    # -- Statement components ----------------------------------------------

    def build_context(self, entity: Any, mode: CrudMode) -> CrudContext:
        cls = entity_class(entity)
        if mode is not CrudMode.DELETE:
            frozen = frozen_part(cls)
            if frozen is not None:
                raise FrozenEntityError(frozen.__name__)
        table = table_name_for(entity)
        fields = extract_fields(entity)
        ctx = CrudContext(entity=entity, mode=mode, table=table, fields=fields)
        d = self._dialect

        persisted = [fd for fd in fields if not fd.no_db]
        keys = [fd for fd in persisted if fd.is_primary_key]
        if not keys:
            raise MissingPrimaryKeyError(table)

        for fd in persisted:
            value = get_value(entity, fd)

            if fd.is_increment:
                ctx.increment_key = fd.storage_name
            if fd.is_primary_key:
                if mode is not CrudMode.CREATE:
                    ctx.keys[fd.storage_name] = value
                    continue
                if fd.is_increment:
                    if d.auto_assign_placeholder is not None:
                        self._emit(ctx, fd, d.auto_assign_placeholder)
                    continue
                ctx.keys[fd.storage_name] = value
            elif mode in (CrudMode.DELETE, CrudMode.GET):
                continue

            default = fd.default
            if default is not None and is_zero(fd, value):
                if mode is CrudMode.UPDATE:
                    self._emit(ctx, fd, d.update_default(d.default_clause(fd.kind, default)))
                elif d.default_placeholder is not None:
                    self._emit(ctx, fd, d.default_placeholder)
                continue
            if value is None and fd.not_null:
                self._emit(ctx, fd, zero_literal(d, fd))
                continue
            self._emit(ctx, fd, to_literal(d, fd, value))

        return ctx

    def _emit(self, ctx: CrudContext, fd: FieldDescription, value: str) -> None:
        ctx.columns.append(self._dialect.quote_identifier(fd.storage_name))
        ctx.values.append(value)

    def _where(self, ctx: CrudContext) -> str:
        by_name = {fd.storage_name: fd for fd in ctx.fields}
        terms = [
            f"{self._dialect.quote_identifier(name)} = {to_literal(self._dialect, by_name[name], value)}"
            for name, value in ctx.keys.items()
        ]
        return " WHERE " + " AND ".join(terms)

    def _reload(self, ctx: CrudContext) -> Any:
        row = self._executor.query_one(self._dialect.select(ctx.table, self._where(ctx)))
        reset_entity(ctx.entity)
        if row is None:
            raise EntityNotFoundError(ctx.table, ctx.keys)
        populate_entity(ctx.entity, ctx.fields, row)
        return ctx.entity


__all__ = ["CrudMode", "CrudContext", "CrudEngine"]
