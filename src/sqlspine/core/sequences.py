"""Sequence and identity management.

Five backends, five ways of handing out key values.  Each
:class:`SequenceManager` implementation hides one of them behind the same
operations (create / alter start / exists / drop / next value) and the same
two insert-time hooks the CRUD engine relies on:

================  ======================  ===================================
strategy          backend                 "sequence" name
================  ======================  ===================================
SerialSequence    postgres                ``<table>_<column>_seq``
AutoIncrement     mysql                   table name
RowIdCounter      sqlite                  table name (row in sqlite_sequence)
IdentityColumn    mssql                   table name
SequenceObject    hdb                     ``SEQ_<TABLE>_<COLUMN>``
================  ======================  ===================================

Backends without a first-class sequence object emulate these operations on
the table's own counter.  :meth:`SequenceManager.sequence_name` maps a
(table, column) pair to whatever name the other operations expect.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlspine.core.catalog import exists, scalar
from sqlspine.core.dialect import IncrementStrategy, SchemaDialect
from sqlspine.core.errors import ConfigError, DatabaseError
from sqlspine.core.logging import get_logger
from sqlspine.core.naming import sequence_name as serial_sequence_name
from sqlspine.core.protocols import Executor
from sqlspine.core.schema import SequenceSpec

logger = get_logger(__name__)


def _insert_sql(table: str, columns: Sequence[str], values: Sequence[str], empty: str) -> str:
    if not columns:
        return f"INSERT INTO {table} {empty};"
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(values)});"


class SequenceManager(ABC):
    """Key-generation strategy bound to one executor."""

    strategy: IncrementStrategy

    def __init__(self, executor: Executor, dialect: SchemaDialect):
        self._executor = executor
        self._dialect = dialect

    @abstractmethod
    def sequence_name(self, table: str, column: str) -> str:
        """Name the sequence operations expect for a table's incrementing key."""
        ...

    @abstractmethod
    def create_sequence(self, name: str, start: int) -> None: ...

    @abstractmethod
    def alter_sequence_start(self, name: str, start: int) -> None: ...

    @abstractmethod
    def exists_sequence(self, name: str) -> bool: ...

    @abstractmethod
    def drop_sequence(self, name: str) -> None: ...

    @abstractmethod
    def next_sequence_value(self, name: str) -> int: ...

    # -- Engine hooks ------------------------------------------------------

    def initialize(self, spec: SequenceSpec) -> None:
        """Apply a pending sequence artifact right after its table was created."""
        if spec.start is not None:
            self.alter_sequence_start(self.sequence_name(spec.table, spec.column), spec.start)

    def release(self, table: str, column: str) -> None:
        """Clean up key generation after the table was dropped."""

    def insert(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[str],
        increment_key: str | None,
    ) -> Any:
        """Run the INSERT and return the generated key value (``None`` without one)."""
        self._executor.execute(_insert_sql(table, columns, values, "DEFAULT VALUES"))
        if increment_key is None:
            return None
        return self._last_insert_id()

    def _last_insert_id(self) -> Any:
        raise NotImplementedError


class SerialSequence(SequenceManager):
    """Postgres ``serial`` columns and their implicit sequences."""

    strategy = IncrementStrategy.SERIAL

    def sequence_name(self, table: str, column: str) -> str:
        return serial_sequence_name(table, column)

    def create_sequence(self, name: str, start: int) -> None:
        self._executor.execute(f"CREATE SEQUENCE IF NOT EXISTS {name} START {start};")

    def alter_sequence_start(self, name: str, start: int) -> None:
        self._executor.execute(f"ALTER SEQUENCE IF EXISTS {name} RESTART WITH {start};")

    def exists_sequence(self, name: str) -> bool:
        return exists(
            self._executor,
            ("SELECT COUNT(*) AS n FROM pg_class WHERE relkind = 'S' AND relname = %s", (name,)),
        )

    def drop_sequence(self, name: str) -> None:
        self._executor.execute(f"DROP SEQUENCE IF EXISTS {name};")

    def next_sequence_value(self, name: str) -> int:
        # reads the sequence state without consuming a value
        row = self._executor.query_one(f"SELECT last_value, is_called FROM {name};")
        if row is None:
            raise DatabaseError(f"sequence {name!r} returned no state")
        last_value = int(row["last_value"])
        return last_value + 1 if row["is_called"] else last_value

    def insert(self, table, columns, values, increment_key):
        if increment_key is None:
            return super().insert(table, columns, values, increment_key)
        sql = _insert_sql(table, columns, values, "DEFAULT VALUES")
        row = self._executor.query_one(f"{sql[:-1]} RETURNING {increment_key};")
        return None if row is None else row[increment_key]


class AutoIncrementCounter(SequenceManager):
    """MySQL AUTO_INCREMENT: the counter is a table option."""

    strategy = IncrementStrategy.AUTO_INCREMENT

    def sequence_name(self, table: str, column: str) -> str:  # noqa: ARG002
        return table

    def create_sequence(self, name: str, start: int) -> None:
        # the counter comes into being with the table; creating it means seeding it
        self.alter_sequence_start(name, start)

    def alter_sequence_start(self, name: str, start: int) -> None:
        self._executor.execute(f"ALTER TABLE {name} AUTO_INCREMENT = {start};")

    def exists_sequence(self, name: str) -> bool:
        return exists(
            self._executor,
            (
                "SELECT COUNT(*) AS n FROM information_schema.tables "
                "WHERE table_schema = DATABASE() AND table_name = %s "
                "AND auto_increment IS NOT NULL",
                (name,),
            ),
        )

    def drop_sequence(self, name: str) -> None:
        logger.debug("sequence_drop_skipped", name=name, reason="auto_increment lives with table")

    def next_sequence_value(self, name: str) -> int:
        value = scalar(
            self._executor,
            "SELECT auto_increment AS n FROM information_schema.tables "
            "WHERE table_schema = DATABASE() AND table_name = %s",
            (name,),
        )
        if value is None:
            raise DatabaseError(f"table {name!r} has no AUTO_INCREMENT counter")
        return int(value)

    def insert(self, table, columns, values, increment_key):
        self._executor.execute(_insert_sql(table, columns, values, "() VALUES ()"))
        if increment_key is None:
            return None
        return self._last_insert_id()

    def _last_insert_id(self) -> Any:
        return scalar(self._executor, "SELECT LAST_INSERT_ID() AS n")


class RowIdCounter(SequenceManager):
    """SQLite AUTOINCREMENT: one row per table in ``sqlite_sequence``.

    The next key is ``seq + 1``, so seeding a start value stores ``start - 1``.
    """

    strategy = IncrementStrategy.ROWID_COUNTER

    def sequence_name(self, table: str, column: str) -> str:  # noqa: ARG002
        return table

    def _has_sequence_table(self) -> bool:
        return exists(
            self._executor,
            (
                "SELECT COUNT(*) AS n FROM sqlite_master "
                "WHERE type = 'table' AND name = 'sqlite_sequence'",
                (),
            ),
        )

    def _current(self, name: str) -> int | None:
        if not self._has_sequence_table():
            return None
        value = scalar(self._executor, "SELECT seq AS n FROM sqlite_sequence WHERE name = ?", (name,))
        return None if value is None else int(value)

    def create_sequence(self, name: str, start: int) -> None:
        self.alter_sequence_start(name, start)

    def alter_sequence_start(self, name: str, start: int) -> None:
        if not self._has_sequence_table():
            raise ConfigError(
                f"cannot seed {name!r}: no AUTOINCREMENT table exists in this database"
            )
        if self._current(name) is None:
            self._executor.execute(
                "INSERT INTO sqlite_sequence (name, seq) VALUES (?, ?);", (name, start - 1)
            )
        else:
            self._executor.execute(
                "UPDATE sqlite_sequence SET seq = ? WHERE name = ?;", (start - 1, name)
            )

    def exists_sequence(self, name: str) -> bool:
        return self._current(name) is not None

    def drop_sequence(self, name: str) -> None:
        if self._has_sequence_table():
            self._executor.execute("DELETE FROM sqlite_sequence WHERE name = ?;", (name,))

    def next_sequence_value(self, name: str) -> int:
        current = self._current(name)
        return 1 if current is None else current + 1

    def _last_insert_id(self) -> Any:
        return scalar(self._executor, "SELECT last_insert_rowid() AS n")


class IdentityColumn(SequenceManager):
    """SQL Server IDENTITY columns, seeded in DDL and reseeded with DBCC CHECKIDENT."""

    strategy = IncrementStrategy.IDENTITY

    def sequence_name(self, table: str, column: str) -> str:  # noqa: ARG002
        return table

    def _identity_state(self, name: str) -> dict[str, Any] | None:
        return self._executor.query_one(
            "SELECT CAST(seed_value AS bigint) AS seed, "
            "CAST(increment_value AS bigint) AS incr, "
            "CAST(last_value AS bigint) AS last "
            "FROM sys.identity_columns WHERE object_id = OBJECT_ID(?)",
            (name,),
        )

    def initialize(self, spec: SequenceSpec) -> None:
        # IDENTITY(<start>,1) in the column clause already carries the start
        logger.debug("identity_seeded_in_ddl", table=spec.table, start=spec.start)

    def create_sequence(self, name: str, start: int) -> None:
        self.alter_sequence_start(name, start)

    def alter_sequence_start(self, name: str, start: int) -> None:
        state = self._identity_state(name)
        if state is None:
            raise ConfigError(f"table {name!r} has no IDENTITY column")
        # before the first insert the reseed value itself is handed out
        reseed = start if state["last"] is None else start - 1
        self._executor.execute(f"DBCC CHECKIDENT ('{name}', RESEED, {reseed});")

    def exists_sequence(self, name: str) -> bool:
        return exists(
            self._executor,
            (
                "SELECT COUNT(*) AS n FROM sys.identity_columns WHERE object_id = OBJECT_ID(?)",
                (name,),
            ),
        )

    def drop_sequence(self, name: str) -> None:
        logger.debug("sequence_drop_skipped", name=name, reason="identity lives with table")

    def next_sequence_value(self, name: str) -> int:
        state = self._identity_state(name)
        if state is None:
            raise DatabaseError(f"table {name!r} has no IDENTITY column")
        if state["last"] is None:
            return int(state["seed"])
        return int(state["last"]) + int(state["incr"])

    def insert(self, table, columns, values, increment_key):
        if increment_key is None:
            return super().insert(table, columns, values, increment_key)
        output = f"OUTPUT INSERTED.{increment_key}"
        if columns:
            sql = (
                f"INSERT INTO {table} ({', '.join(columns)}) {output} "
                f"VALUES ({', '.join(values)});"
            )
        else:
            sql = f"INSERT INTO {table} {output} DEFAULT VALUES;"
        return scalar(self._executor, sql, column=increment_key)


class SequenceObject(SequenceManager):
    """HANA sequences: created beside the table, NEXTVAL fetched before each insert."""

    strategy = IncrementStrategy.SEQUENCE_OBJECT

    def sequence_name(self, table: str, column: str) -> str:
        return f"SEQ_{table}_{column}".upper()

    def initialize(self, spec: SequenceSpec) -> None:
        start = spec.start if spec.start is not None else 1
        self.create_sequence(self.sequence_name(spec.table, spec.column), start)

    def release(self, table: str, column: str) -> None:
        self.drop_sequence(self.sequence_name(table, column))

    def create_sequence(self, name: str, start: int) -> None:
        self.drop_sequence(name)
        self._executor.execute(f"CREATE SEQUENCE {name} START WITH {start} INCREMENT BY 1;")

    def alter_sequence_start(self, name: str, start: int) -> None:
        self._executor.execute(f"ALTER SEQUENCE {name} RESTART WITH {start};")

    def exists_sequence(self, name: str) -> bool:
        return exists(
            self._executor,
            (
                "SELECT COUNT(*) AS n FROM SYS.SEQUENCES "
                "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND SEQUENCE_NAME = ?",
                (name.upper(),),
            ),
        )

    def drop_sequence(self, name: str) -> None:
        if self.exists_sequence(name):
            self._executor.execute(f"DROP SEQUENCE {name};")

    def next_sequence_value(self, name: str) -> int:
        # NEXTVAL consumes the value; HANA has no side-effect-free peek
        value = scalar(self._executor, f"SELECT {name}.NEXTVAL AS n FROM DUMMY")
        if value is None:
            raise DatabaseError(f"sequence {name!r} returned no value")
        return int(value)

    def insert(self, table, columns, values, increment_key):
        if increment_key is None:
            return super().insert(table, columns, values, increment_key)
        key = self.next_sequence_value(self.sequence_name(table, increment_key))
        self._executor.execute(
            _insert_sql(table, [increment_key, *columns], [str(key), *values], "DEFAULT VALUES")
        )
        return key


_STRATEGIES: dict[IncrementStrategy, type[SequenceManager]] = {
    IncrementStrategy.SERIAL: SerialSequence,
    IncrementStrategy.AUTO_INCREMENT: AutoIncrementCounter,
    IncrementStrategy.ROWID_COUNTER: RowIdCounter,
    IncrementStrategy.IDENTITY: IdentityColumn,
    IncrementStrategy.SEQUENCE_OBJECT: SequenceObject,
}


def sequence_manager_for(dialect: SchemaDialect, executor: Executor) -> SequenceManager:
    """Sequence manager implementing ``dialect``'s increment strategy."""
    try:
        cls = _STRATEGIES[dialect.increment]
    except KeyError:
        raise ConfigError(f"no sequence manager for strategy {dialect.increment!r}") from None
    return cls(executor, dialect)


__all__ = [
    "SequenceManager",
    "SerialSequence",
    "AutoIncrementCounter",
    "RowIdCounter",
    "IdentityColumn",
    "SequenceObject",
    "sequence_manager_for",
]
