"""The sqlspine engine: one executor, one dialect, every operation.

``Engine`` is the caller-facing surface.  It composes the schema builder,
migrator, sequence manager, index/foreign-key manager, CRUD engine and query
builder around a single :class:`~sqlspine.core.protocols.Executor` and the
:class:`~sqlspine.core.dialect.SchemaDialect` matching its ``name``.

Manifesto:
    Callers hold one object per database.  Everything backend-specific
    is decided by the dialect chosen at construction; everything that
    touches the database goes through the executor.  The engine keeps no
    state between calls beyond those two collaborators and its options.

Examples:
    >>> from sqlspine import Engine, column
    >>> from sqlspine.core.adapters import SQLiteAdapter
    >>> adapter = SQLiteAdapter(":memory:")
    >>> adapter.connect()
    >>> engine = Engine(adapter)
    >>> engine.get_db_name()
    'sqlite'

Tags:
    engine, facade, orm, crud, migration, sqlspine
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlspine.core.crud import CrudEngine
from sqlspine.core.dialect import SchemaDialect, get_dialect
from sqlspine.core.indexes import IndexManager
from sqlspine.core.logging import get_logger, set_log_level
from sqlspine.core.meta import extract_fields
from sqlspine.core.migration import Migrator
from sqlspine.core.naming import table_name_for
from sqlspine.core.protocols import Executor, Row
from sqlspine.core.query import Predicate, QueryBuilder
from sqlspine.core.schema import IndexSpec, SchemaBuildResult
from sqlspine.core.sequences import sequence_manager_for
from sqlspine.core.values import bool_to_db_bool, db_bool_to_bool, time_to_formatted_string

if TYPE_CHECKING:
    from sqlspine.core.settings import SqlSpineSettings

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineOptions:
    """Tracing switches for one engine.

    log_schema      : log every SchemaBuildResult as ``schema_built``
    log_statements  : log every executed statement as ``sql_statement``
    """

    log_schema: bool = False
    log_statements: bool = False


class LoggingExecutor:
    """Executor wrapper that logs each statement before running it."""

    def __init__(self, inner: Executor):
        self._inner = inner

    @property
    def name(self) -> str:
        return self._inner.name

    def _log(self, sql: str, params: Sequence[Any]) -> None:
        logger.info("sql_statement", sql=sql, params=list(params), backend=self._inner.name)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        self._log(sql, params)
        return self._inner.execute(sql, params)

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Row | None:
        self._log(sql, params)
        return self._inner.query_one(sql, params)

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        self._log(sql, params)
        return self._inner.query(sql, params)


class Engine:
    """Schema, sequence, index, CRUD and query operations over one executor."""

    def __init__(
        self,
        executor: Executor,
        dialect: SchemaDialect | None = None,
        options: EngineOptions | None = None,
    ):
        self._raw = executor
        self.options = options or EngineOptions()
        self.dialect = dialect or get_dialect(executor.name)
        self.executor: Executor = (
            LoggingExecutor(executor) if self.options.log_statements else executor
        )

        self.sequences = sequence_manager_for(self.dialect, self.executor)
        self.indexes = IndexManager(self.executor, self.dialect)
        self.migrator = Migrator(
            self.executor,
            self.dialect,
            self.indexes,
            self.sequences,
            log_schema=self.options.log_schema,
        )
        self.crud = CrudEngine(self.executor, self.dialect, self.sequences)
        self.queries = QueryBuilder(self.executor, self.dialect)

    # -- Lifecycle -----------------------------------------------------------

    def close(self) -> None:
        disconnect = getattr(self._raw, "disconnect", None)
        if callable(disconnect):
            disconnect()

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -- Backend info --------------------------------------------------------

    def get_db_name(self) -> str:
        return self.dialect.name

    def get_db_quote(self) -> str:
        return self.dialect.quote

    def bool_to_db_bool(self, value: bool) -> str:
        return bool_to_db_bool(self.dialect, value)

    def db_bool_to_bool(self, raw: Any) -> bool:
        return db_bool_to_bool(raw)

    def time_to_formatted_string(self, value: datetime) -> str:
        return time_to_formatted_string(self.dialect, value)

    # -- Schema ----------------------------------------------------------------

    def build_schema(self, entity: Any) -> SchemaBuildResult:
        """Build (without executing) the schema for ``entity``."""
        return self.migrator.build(entity)

    def create_tables(self, *entities: Any) -> None:
        self.migrator.create_tables(entities)

    def alter_tables(self, *entities: Any) -> None:
        self.migrator.alter_tables(entities)

    def drop_tables(self, *entities: Any) -> None:
        self.migrator.drop_tables(entities)

    def destructive_reset_tables(self, *entities: Any) -> None:
        self.migrator.destructive_reset_tables(entities)

    def exists_table(self, table: str) -> bool:
        return self.migrator.exists_table(table)

    def exists_column(self, table: str, column: str) -> bool:
        return self.migrator.exists_column(table, column)

    # -- Indexes -----------------------------------------------------------------

    def create_index(self, name: str, spec: IndexSpec) -> None:
        self.indexes.create_index(name, spec)

    def drop_index(self, table: str, name: str) -> None:
        self.indexes.drop_index(table, name)

    def exists_index(self, table: str, name: str) -> bool:
        return self.indexes.exists_index(table, name)

    # -- Sequences ---------------------------------------------------------------

    def sequence_name_for(self, entity: Any) -> str:
        """Name the sequence operations use for ``entity``'s incrementing key."""
        table = table_name_for(entity)
        for fd in extract_fields(entity):
            if fd.is_increment and not fd.no_db:
                return self.sequences.sequence_name(table, fd.storage_name)
        return table

    def create_sequence(self, name: str, start: int) -> None:
        self.sequences.create_sequence(name, start)

    def alter_sequence_start(self, name: str, start: int) -> None:
        self.sequences.alter_sequence_start(name, start)

    def drop_sequence(self, name: str) -> None:
        self.sequences.drop_sequence(name)

    def exists_sequence(self, name: str) -> bool:
        return self.sequences.exists_sequence(name)

    def get_next_sequence_value(self, name: str) -> int:
        return self.sequences.next_sequence_value(name)

    # -- Foreign keys ------------------------------------------------------------

    def create_foreign_key(
        self,
        entity: Any,
        from_table: str,
        ref_table: str,
        from_field: str,
        ref_field: str,
    ) -> None:
        self.indexes.create_foreign_key(entity, from_table, ref_table, from_field, ref_field)

    def drop_foreign_key(
        self, from_table: str, ref_table: str, from_field: str, ref_field: str
    ) -> None:
        self.indexes.drop_foreign_key(from_table, ref_table, from_field, ref_field)

    def exists_foreign_key_by_name(self, name: str) -> bool:
        return self.indexes.exists_foreign_key_by_name(name)

    def exists_foreign_key_by_fields(
        self, from_table: str, ref_table: str, from_field: str, ref_field: str
    ) -> bool:
        return self.indexes.exists_foreign_key_by_fields(
            from_table, ref_table, from_field, ref_field
        )

    # -- CRUD --------------------------------------------------------------------

    def create(self, entity: Any) -> Any:
        return self.crud.create(entity)

    def update(self, entity: Any) -> Any:
        return self.crud.update(entity)

    def delete(self, entity: Any) -> None:
        self.crud.delete(entity)

    def get_entity(self, entity: Any) -> Any:
        return self.crud.get_entity(entity)

    # -- Queries -----------------------------------------------------------------

    def get_entities(self, entity: Any) -> list[Any]:
        return self.queries.get_entities(entity)

    def get_entities_with_commands(
        self,
        entity: Any,
        predicates: Sequence[Predicate] = (),
        directives: Mapping[str, Any] | None = None,
    ) -> list[Any] | int:
        return self.queries.get_entities_with_commands(entity, predicates, directives)

    # -- Pass-throughs -----------------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        return self.executor.execute(sql, params)

    def query_rows(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        return self.executor.query(sql, params)

    def query_row(self, sql: str, params: Sequence[Any] = ()) -> Row | None:
        return self.executor.query_one(sql, params)


def open_engine(settings: SqlSpineSettings | None = None) -> Engine:
    """Connect the adapter described by ``settings`` and wrap it in an Engine.

    Reads ``SQLSPINE_*`` environment variables when no settings are given.
    ``log_level`` becomes the structlog level filter before the adapter
    connects.
    """
    from sqlspine.core.adapters import get_adapter
    from sqlspine.core.settings import SqlSpineSettings

    settings = settings or SqlSpineSettings()
    set_log_level(settings.log_level)
    adapter = get_adapter(settings.db_type, **settings.adapter_kwargs())
    adapter.connect()
    logger.info("engine_opened", backend=adapter.name)
    return Engine(adapter, options=settings.engine_options())


__all__ = ["EngineOptions", "LoggingExecutor", "Engine", "open_engine"]
