"""Schema migration: create, alter, drop and reset entity tables.

Every call re-reads the live catalog; nothing about the schema is cached
between calls.

Foreign keys need their referenced table to exist.  Creation therefore runs
in two phases: tables first, collecting every requested foreign key as a
:class:`PendingForeignKey`, then the foreign keys.  :meth:`Migrator.alter_tables`
hands the pending list from table creation to the final pass explicitly, so
a table created in the same call can be referenced by a table that was
only altered.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlspine.core.catalog import exists
from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import PrimaryKeyAlterationError
from sqlspine.core.indexes import IndexManager
from sqlspine.core.logging import get_logger
from sqlspine.core.naming import table_name_for
from sqlspine.core.protocols import Executor
from sqlspine.core.schema import ForeignKeySpec, SchemaBuilder, SchemaBuildResult
from sqlspine.core.sequences import SequenceManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingForeignKey:
    """A foreign key requested by ``entity`` that has not been created yet."""

    entity: Any
    spec: ForeignKeySpec


class Migrator:
    """Drives schema creation and alteration for one executor and dialect."""

    def __init__(
        self,
        executor: Executor,
        dialect: SchemaDialect,
        indexes: IndexManager,
        sequences: SequenceManager,
        *,
        log_schema: bool = False,
    ):
        self._executor = executor
        self._dialect = dialect
        self._builder = SchemaBuilder(dialect)
        self._indexes = indexes
        self._sequences = sequences
        self._log_schema = log_schema

    # -- Existence ---------------------------------------------------------

    def exists_table(self, table: str) -> bool:
        return exists(self._executor, self._dialect.table_exists_query(table))

    def exists_column(self, table: str, column: str) -> bool:
        return exists(self._executor, self._dialect.column_exists_query(table, column))

    # -- Schema building ---------------------------------------------------

    def build(self, entity: Any) -> SchemaBuildResult:
        result = self._builder.build(table_name_for(entity), entity)
        if self._log_schema:
            result.log_to(logger)
        return result

    # -- Operations --------------------------------------------------------

    def create_tables(self, entities: Iterable[Any]) -> None:
        """Create every entity's table, then every foreign key they declare."""
        pending: list[PendingForeignKey] = []
        for entity in entities:
            pending.extend(self._create(entity))
        if pending:
            logger.debug("foreign_keys_deferred", names=[p.spec.name for p in pending])
        self._create_foreign_keys(pending)

    def alter_tables(self, entities: Iterable[Any]) -> None:
        """Create missing tables and add missing columns and indexes to existing ones.

        Raises:
            PrimaryKeyAlterationError: A missing column is part of the primary
                key.  Nothing is executed for that table.
        """
        to_create: list[Any] = []
        to_alter: list[Any] = []
        for entity in entities:
            if self.exists_table(table_name_for(entity)):
                to_alter.append(entity)
            else:
                to_create.append(entity)
        logger.debug(
            "alter_tables_plan",
            create=[table_name_for(e) for e in to_create],
            alter=[table_name_for(e) for e in to_alter],
        )

        pending: list[PendingForeignKey] = []
        for entity in to_create:
            pending.extend(self._create(entity))
        if pending:
            logger.debug("foreign_keys_deferred", names=[p.spec.name for p in pending])

        for entity in to_alter:
            pending.extend(self._alter(entity))

        self._create_foreign_keys(pending)

    def drop_tables(self, entities: Iterable[Any]) -> None:
        """Drop each entity's table, in the order given, if it exists."""
        for entity in entities:
            table = table_name_for(entity)
            if not self.exists_table(table):
                logger.debug("drop_table_skipped", table=table, reason="missing")
                continue
            result = self.build(entity)
            self._executor.execute(self._dialect.drop_table(table))
            for seq in result.sequences:
                self._sequences.release(seq.table, seq.column)

    def destructive_reset_tables(self, entities: Iterable[Any]) -> None:
        """Drop and recreate each entity's table; all rows are lost."""
        entities = list(entities)
        self.drop_tables(entities)
        self.create_tables(entities)

    # -- Internals ---------------------------------------------------------

    def _create(self, entity: Any) -> list[PendingForeignKey]:
        result = self.build(entity)
        self._executor.execute(result.create_sql)
        for seq in result.sequences:
            self._sequences.initialize(seq)
        for name, spec in result.indexes.items():
            self._indexes.create_index(name, spec)
        return [PendingForeignKey(entity, fk) for fk in result.foreign_keys]

    def _alter(self, entity: Any) -> list[PendingForeignKey]:
        result = self.build(entity)
        table = result.table

        missing = [
            col for col in result.columns if not self.exists_column(table, col.field.storage_name)
        ]
        for col in missing:
            if col.field.storage_name in result.primary_keys:
                raise PrimaryKeyAlterationError(table, col.field.storage_name)

        if missing:
            logger.debug(
                "columns_added", table=table, columns=[c.field.storage_name for c in missing]
            )
            for stmt in self._dialect.add_columns(table, [c.clause for c in missing]):
                self._executor.execute(stmt)

        for name, spec in result.indexes.items():
            if not self._indexes.exists_index(table, name):
                self._indexes.create_index(name, spec)

        return [PendingForeignKey(entity, fk) for fk in result.foreign_keys]

    def _create_foreign_keys(self, pending: list[PendingForeignKey]) -> None:
        for item in pending:
            fk = item.spec
            if self._indexes.exists_foreign_key_by_name(fk.name):
                continue
            self._indexes.create_foreign_key(
                item.entity, fk.from_table, fk.ref_table, fk.from_field, fk.ref_field
            )


__all__ = ["PendingForeignKey", "Migrator"]
