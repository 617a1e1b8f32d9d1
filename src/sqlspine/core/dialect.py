"""SQL dialects for schema, CRUD and query generation.

Provides a ``SchemaDialect`` protocol and one concrete implementation per
supported backend.  The engine composes exactly one dialect and asks it for
every backend-specific piece of SQL: column types, default expressions,
primary-key clauses, catalog queries, index and foreign-key DDL, paging
syntax, literals and placeholders.  Dialects never execute anything.

Manifesto:
    One metadata model has to produce correct SQL on five engines that
    disagree about almost everything: how keys increment, how defaults are
    spelled, how pages are cut, and what a boolean looks like.  Keeping
    every one of those differences behind one interface lets the schema
    builder, the CRUD engine and the query builder stay dialect-neutral.

    - **One interface:** SchemaDialect protocol for all SQL text
    - **No inheritance:** each dialect is complete on its own
    - **Stateless:** dialects are pre-instantiated singletons
    - **Testable:** every method returns plain strings

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                    SchemaDialect (protocol)                       │
    └──────────────────────────────────────────────────────────────────┘
         │             │             │             │             │
    ┌─────────┐  ┌──────────┐  ┌──────────┐  ┌──────────┐  ┌──────────┐
    │postgres │  │  mysql   │  │  sqlite  │  │  mssql   │  │   hdb    │
    │ %s      │  │ %s       │  │ ?        │  │ ?        │  │ ?        │
    │ serial  │  │ AUTO_INC │  │ AUTOINC  │  │ IDENTITY │  │ SEQUENCE │
    │ LIMIT   │  │ LIMIT    │  │ LIMIT    │  │ TOP/FETCH│  │ LIMIT    │
    └─────────┘  └──────────┘  └──────────┘  └──────────┘  └──────────┘

Examples:
    >>> from sqlspine.core.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.column_type("int64", increment=True)
    'integer'
    >>> d.default_clause("str", "YYC")
    "DEFAULT 'YYC'"

Guardrails:
    ❌ DON'T: Branch on backend names in the engine
    ✅ DO: Add a capability to SchemaDialect and implement it five times

Tags:
    dialect, sql, ddl, portability, postgres, mysql, sqlite, mssql, hana
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from sqlspine.core.errors import ConfigError


class IncrementStrategy(str, Enum):
    """How a backend assigns values to an incrementing primary key."""

    SERIAL = "serial"  # column type owns an implicit sequence (postgres)
    AUTO_INCREMENT = "auto_increment"  # table-level counter (mysql)
    ROWID_COUNTER = "rowid_counter"  # sqlite_sequence row per table (sqlite)
    IDENTITY = "identity"  # reseedable identity column (mssql)
    SEQUENCE_OBJECT = "sequence_object"  # explicit sequence, manual NEXTVAL (hdb)


Query = tuple[str, tuple[Any, ...]]


@runtime_checkable
class SchemaDialect(Protocol):
    """SQL dialect contract.

    Every method returns SQL text (or a ``(sql, params)`` pair for catalog
    queries) that is valid for the target backend.
    """

    @property
    def name(self) -> str:
        """Canonical backend name (``postgres``, ``mysql``, ``sqlite``, ``mssql``, ``hdb``)."""
        ...

    @property
    def quote(self) -> str:
        """Identifier quote character used in DDL column lists (may be empty)."""
        ...

    @property
    def increment(self) -> IncrementStrategy:
        """Auto-increment strategy of this backend."""
        ...

    @property
    def inline_increment_key(self) -> bool:
        """Whether an incrementing key declares PRIMARY KEY on its own column."""
        ...

    @property
    def supports_add_constraint(self) -> bool:
        """Whether ``ALTER TABLE ... ADD CONSTRAINT`` is available."""
        ...

    @property
    def auto_assign_placeholder(self) -> str | None:
        """INSERT value for an incrementing key, or ``None`` to omit the column."""
        ...

    @property
    def default_placeholder(self) -> str | None:
        """INSERT value meaning "use the column default", or ``None`` to omit it."""
        ...

    # -- Identifiers and placeholders ---------------------------------------

    def placeholder(self) -> str:
        """Positional parameter marker for this backend's driver."""
        ...

    def quote_identifier(self, ident: str) -> str: ...

    # -- Types and defaults --------------------------------------------------

    def column_type(self, kind: str, increment: bool = False) -> str | None:
        """Column type for a field kind, or ``None`` when unmapped."""
        ...

    def increment_clause(self, start: int | None) -> str:
        """Column-clause suffix marking an incrementing key (may be empty)."""
        ...

    def now(self) -> str:
        """Current-timestamp expression used for ``default:now()``."""
        ...

    def end_of_time(self) -> str:
        """Far-future timestamp literal used for ``default:eot``."""
        ...

    def default_clause(self, kind: str, value: str) -> str:
        """Backend-correct ``DEFAULT ...`` clause for a declared default."""
        ...

    def update_default(self, default_clause: str) -> str:
        """SET value restoring a column's default in an UPDATE."""
        ...

    # -- Table DDL -----------------------------------------------------------

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str: ...

    def create_table(self, table: str, clauses: Sequence[str]) -> str: ...

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        """ALTER TABLE statements adding the given column clauses."""
        ...

    def drop_table(self, table: str) -> str: ...

    # -- Index / foreign-key DDL -------------------------------------------

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str: ...

    def drop_index(self, table: str, name: str) -> str: ...

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str: ...

    def drop_foreign_key(self, from_table: str, name: str) -> str: ...

    # -- Catalog queries ---------------------------------------------------

    def table_exists_query(self, table: str) -> Query: ...

    def column_exists_query(self, table: str, column: str) -> Query: ...

    def index_exists_query(self, table: str, name: str) -> Query: ...

    def foreign_key_exists_query(self, name: str) -> Query: ...

    # -- Queries and literals ----------------------------------------------

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        """SELECT * statement with backend paging syntax.

        ``where`` and ``order_by`` are complete clauses (``" WHERE ..."``)
        or empty strings.
        """
        ...

    def bool_literal(self, value: bool) -> str: ...

    def string_literal(self, value: str) -> str: ...

    def format_timestamp(self, value: datetime) -> str:
        """Timestamp literal body (unquoted) in this backend's pattern."""
        ...


# =========================================================================
# Shared helpers
# =========================================================================


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _quote_sql_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _parse_default_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "t"):
        return True
    if lowered in ("false", "0", "f"):
        return False
    raise ConfigError(f"invalid boolean default {value!r}")


def _default_clause(dialect: SchemaDialect, kind: str, value: str) -> str:
    if value == "now()":
        return f"DEFAULT {dialect.now()}"
    if value == "eot":
        return f"DEFAULT {dialect.end_of_time()}"
    if kind == "bool":
        return f"DEFAULT {dialect.bool_literal(_parse_default_bool(value))}"
    if kind in ("str", "datetime"):
        return f"DEFAULT {dialect.string_literal(value)}"
    return f"DEFAULT {value}"


def _limit_offset(limit: int | None, offset: int | None, unbounded: str | None) -> str:
    sql = ""
    if limit is not None:
        sql += f" LIMIT {limit}"
    elif offset is not None and unbounded is not None:
        sql += f" LIMIT {unbounded}"
    if offset is not None:
        sql += f" OFFSET {offset}"
    return sql


def _column_list(dialect: SchemaDialect, columns: Sequence[str]) -> str:
    return ", ".join(dialect.quote_identifier(c) for c in columns)


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class PostgresDialect:
    """Postgres dialect: ``%s`` placeholders, serial keys, implicit sequences."""

    _TYPES = {
        "int": "integer",
        "int8": "integer",
        "int16": "integer",
        "int32": "integer",
        "int64": "bigint",
        "uint": "integer",
        "uint8": "integer",
        "uint16": "integer",
        "uint32": "integer",
        "uint64": "bigint",
        "float32": "numeric",
        "float64": "numeric",
        "bool": "boolean",
        "str": "text",
        "datetime": "timestamp with time zone",
    }

    name = "postgres"
    quote = ""
    increment = IncrementStrategy.SERIAL
    inline_increment_key = False
    supports_add_constraint = True
    auto_assign_placeholder = "DEFAULT"
    default_placeholder = "DEFAULT"

    def placeholder(self) -> str:
        return "%s"

    def quote_identifier(self, ident: str) -> str:
        return ident

    # -- Types -------------------------------------------------------------

    def column_type(self, kind: str, increment: bool = False) -> str | None:
        if increment and kind in self._TYPES and "int" in kind:
            return "bigserial" if kind.endswith("64") else "serial"
        return self._TYPES.get(kind)

    def increment_clause(self, start: int | None) -> str:  # noqa: ARG002
        return ""

    def now(self) -> str:
        return "now()"

    def end_of_time(self) -> str:
        return "make_timestamptz(9999, 12, 31, 23, 59, 59.9)"

    def default_clause(self, kind: str, value: str) -> str:
        return _default_clause(self, kind, value)

    def update_default(self, default_clause: str) -> str:  # noqa: ARG002
        return "DEFAULT"

    # -- Tables ------------------------------------------------------------

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str:
        return f"CONSTRAINT {table}_pkey PRIMARY KEY ({_column_list(self, columns)})"

    def create_table(self, table: str, clauses: Sequence[str]) -> str:
        return f"CREATE TABLE {table} ({', '.join(clauses)});"

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        adds = ", ".join(f"ADD COLUMN {c}" for c in clauses)
        return [f"ALTER TABLE IF EXISTS {table} {adds};"]

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table};"

    # -- Indexes / FKs -----------------------------------------------------

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str:
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {name} ON {table} ({', '.join(columns)});"

    def drop_index(self, table: str, name: str) -> str:  # noqa: ARG002
        return f"DROP INDEX IF EXISTS {name};"

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str:
        return (
            f"ALTER TABLE {from_table} ADD CONSTRAINT {name} "
            f"FOREIGN KEY ({from_field}) REFERENCES {ref_table}({ref_field});"
        )

    def drop_foreign_key(self, from_table: str, name: str) -> str:
        return f"ALTER TABLE IF EXISTS {from_table} DROP CONSTRAINT IF EXISTS {name};"

    # -- Introspection -----------------------------------------------------

    def table_exists_query(self, table: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_name = %s",
            (table,),
        )

    def column_exists_query(self, table: str, column: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.columns "
            "WHERE table_schema = current_schema() AND table_name = %s AND column_name = %s",
            (table, column),
        )

    def index_exists_query(self, table: str, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM pg_indexes "
            "WHERE schemaname = current_schema() AND tablename = %s AND indexname = %s",
            (table, name),
        )

    def foreign_key_exists_query(self, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.table_constraints "
            "WHERE constraint_type = 'FOREIGN KEY' AND constraint_name = %s",
            (name,),
        )

    # -- Queries / literals ------------------------------------------------

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        return f"SELECT * FROM {table}{where}{order_by}{_limit_offset(limit, offset, None)};"

    def bool_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def string_literal(self, value: str) -> str:
        return _quote_sql_string(value)

    def format_timestamp(self, value: datetime) -> str:
        return _utc(value).strftime("%Y-%m-%d %H:%M:%S.%f") + "+00:00"


class MySQLDialect:
    """MySQL dialect: ``%s`` placeholders, AUTO_INCREMENT keys, InnoDB tables."""

    _TYPES = {
        "int": "int",
        "int8": "tinyint",
        "int16": "smallint",
        "int32": "int",
        "int64": "bigint",
        "uint": "int unsigned",
        "uint8": "tinyint unsigned",
        "uint16": "smallint unsigned",
        "uint32": "int unsigned",
        "uint64": "bigint unsigned",
        "float32": "float",
        "float64": "double",
        "bool": "boolean",
        "str": "varchar(255)",
        "datetime": "timestamp",
    }

    name = "mysql"
    quote = "`"
    increment = IncrementStrategy.AUTO_INCREMENT
    inline_increment_key = False
    supports_add_constraint = True
    auto_assign_placeholder = "DEFAULT"
    default_placeholder = "DEFAULT"

    def placeholder(self) -> str:
        return "%s"

    def quote_identifier(self, ident: str) -> str:
        return f"`{ident}`"

    def column_type(self, kind: str, increment: bool = False) -> str | None:  # noqa: ARG002
        return self._TYPES.get(kind)

    def increment_clause(self, start: int | None) -> str:  # noqa: ARG002
        return "AUTO_INCREMENT"

    def now(self) -> str:
        return "CURRENT_TIMESTAMP"

    def end_of_time(self) -> str:
        # upper bound of the timestamp type
        return "'2038-01-19 03:14:07'"

    def default_clause(self, kind: str, value: str) -> str:
        return _default_clause(self, kind, value)

    def update_default(self, default_clause: str) -> str:  # noqa: ARG002
        return "DEFAULT"

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str:  # noqa: ARG002
        return f"PRIMARY KEY ({_column_list(self, columns)})"

    def create_table(self, table: str, clauses: Sequence[str]) -> str:
        return f"CREATE TABLE {table} ({', '.join(clauses)}) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;"

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        adds = ", ".join(f"ADD COLUMN {c}" for c in clauses)
        return [f"ALTER TABLE {table} {adds};"]

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table};"

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str:
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {name} ON {table} ({_column_list(self, columns)});"

    def drop_index(self, table: str, name: str) -> str:
        return f"DROP INDEX {name} ON {table};"

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str:
        return (
            f"ALTER TABLE {from_table} ADD CONSTRAINT {name} "
            f"FOREIGN KEY ({from_field}) REFERENCES {ref_table}({ref_field});"
        )

    def drop_foreign_key(self, from_table: str, name: str) -> str:
        return f"ALTER TABLE {from_table} DROP FOREIGN KEY {name};"

    def table_exists_query(self, table: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.tables "
            "WHERE table_schema = DATABASE() AND table_name = %s",
            (table,),
        )

    def column_exists_query(self, table: str, column: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.columns "
            "WHERE table_schema = DATABASE() AND table_name = %s AND column_name = %s",
            (table, column),
        )

    def index_exists_query(self, table: str, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.statistics "
            "WHERE table_schema = DATABASE() AND table_name = %s AND index_name = %s",
            (table, name),
        )

    def foreign_key_exists_query(self, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM information_schema.table_constraints "
            "WHERE table_schema = DATABASE() AND constraint_type = 'FOREIGN KEY' "
            "AND constraint_name = %s",
            (name,),
        )

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        paging = _limit_offset(limit, offset, "18446744073709551615")
        return f"SELECT * FROM {table}{where}{order_by}{paging};"

    def bool_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def string_literal(self, value: str) -> str:
        # backslash is an escape character unless NO_BACKSLASH_ESCAPES is set
        return _quote_sql_string(value.replace("\\", "\\\\"))

    def format_timestamp(self, value: datetime) -> str:
        return _utc(value).strftime("%Y-%m-%d %H:%M:%S")


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, AUTOINCREMENT keys on ``integer``."""

    _TYPES = {
        "int": "integer",
        "int8": "integer",
        "int16": "integer",
        "int32": "integer",
        "int64": "bigint",
        "uint": "integer",
        "uint8": "integer",
        "uint16": "integer",
        "uint32": "integer",
        "uint64": "bigint",
        "float32": "real",
        "float64": "real",
        "bool": "boolean",
        "str": "text",
        "datetime": "timestamp",
    }

    name = "sqlite"
    quote = '"'
    increment = IncrementStrategy.ROWID_COUNTER
    inline_increment_key = True
    supports_add_constraint = False
    auto_assign_placeholder = None
    default_placeholder = None

    def placeholder(self) -> str:
        return "?"

    def quote_identifier(self, ident: str) -> str:
        return f'"{ident}"'

    def column_type(self, kind: str, increment: bool = False) -> str | None:
        if increment and kind in self._TYPES and "int" in kind:
            # AUTOINCREMENT only attaches to an INTEGER PRIMARY KEY column
            return "integer"
        return self._TYPES.get(kind)

    def increment_clause(self, start: int | None) -> str:  # noqa: ARG002
        return "PRIMARY KEY AUTOINCREMENT"

    def now(self) -> str:
        return "CURRENT_TIMESTAMP"

    def end_of_time(self) -> str:
        return "'9999-12-31 23:59:59'"

    def default_clause(self, kind: str, value: str) -> str:
        return _default_clause(self, kind, value)

    def update_default(self, default_clause: str) -> str:
        return default_clause.removeprefix("DEFAULT ")

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str:  # noqa: ARG002
        return f"PRIMARY KEY ({_column_list(self, columns)})"

    def create_table(self, table: str, clauses: Sequence[str]) -> str:
        return f"CREATE TABLE {table} ({', '.join(clauses)});"

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        # one column per ALTER TABLE statement
        return [f"ALTER TABLE {table} ADD COLUMN {c};" for c in clauses]

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table};"

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str:
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {name} ON {table} ({_column_list(self, columns)});"

    def drop_index(self, table: str, name: str) -> str:  # noqa: ARG002
        return f"DROP INDEX IF EXISTS {name};"

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str:
        # table-constraint clause, spliced into a rebuilt CREATE TABLE
        return f"CONSTRAINT {name} FOREIGN KEY ({from_field}) REFERENCES {ref_table}({ref_field})"

    def drop_foreign_key(self, from_table: str, name: str) -> str:  # noqa: ARG002
        # marker locating the constraint inside the stored table definition
        return f"CONSTRAINT {name} "

    def table_exists_query(self, table: str) -> Query:
        return "SELECT COUNT(*) AS n FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)

    def column_exists_query(self, table: str, column: str) -> Query:
        return "SELECT COUNT(*) AS n FROM pragma_table_info(?) WHERE name = ?", (table, column)

    def index_exists_query(self, table: str, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM sqlite_master WHERE type = 'index' AND tbl_name = ? AND name = ?",
            (table, name),
        )

    def foreign_key_exists_query(self, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM sqlite_master WHERE type = 'table' AND instr(sql, ?) > 0",
            (f"CONSTRAINT {name} ",),
        )

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        return f"SELECT * FROM {table}{where}{order_by}{_limit_offset(limit, offset, '-1')};"

    def bool_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def string_literal(self, value: str) -> str:
        return _quote_sql_string(value)

    def format_timestamp(self, value: datetime) -> str:
        return _utc(value).strftime("%Y-%m-%d %H:%M:%S")


class MSSQLDialect:
    """SQL Server dialect: ``?`` placeholders (pyodbc), IDENTITY keys, TOP/FETCH paging."""

    _TYPES = {
        "int": "int",
        "int8": "tinyint",
        "int16": "smallint",
        "int32": "int",
        "int64": "bigint",
        "uint": "int",
        "uint8": "tinyint",
        "uint16": "int",
        "uint32": "bigint",
        "uint64": "bigint",
        "float32": "real",
        "float64": "float",
        "bool": "bit",
        "str": "nvarchar(255)",
        "datetime": "datetime2",
    }

    name = "mssql"
    quote = ""
    increment = IncrementStrategy.IDENTITY
    inline_increment_key = False
    supports_add_constraint = True
    auto_assign_placeholder = None
    default_placeholder = "DEFAULT"

    def placeholder(self) -> str:
        return "?"

    def quote_identifier(self, ident: str) -> str:
        return ident

    def column_type(self, kind: str, increment: bool = False) -> str | None:  # noqa: ARG002
        return self._TYPES.get(kind)

    def increment_clause(self, start: int | None) -> str:
        return f"IDENTITY({start if start is not None else 1},1)"

    def now(self) -> str:
        return "SYSUTCDATETIME()"

    def end_of_time(self) -> str:
        return "'9999-12-31 23:59:59.9999999'"

    def default_clause(self, kind: str, value: str) -> str:
        return _default_clause(self, kind, value)

    def update_default(self, default_clause: str) -> str:  # noqa: ARG002
        return "DEFAULT"

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str:  # noqa: ARG002
        return f"PRIMARY KEY ({_column_list(self, columns)})"

    def create_table(self, table: str, clauses: Sequence[str]) -> str:
        return f"CREATE TABLE {table} ({', '.join(clauses)});"

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        return [f"ALTER TABLE {table} ADD {', '.join(clauses)};"]

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {table};"

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str:
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {name} ON {table} ({', '.join(columns)});"

    def drop_index(self, table: str, name: str) -> str:
        return f"DROP INDEX {name} ON {table};"

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str:
        return (
            f"ALTER TABLE {from_table} ADD CONSTRAINT {name} "
            f"FOREIGN KEY ({from_field}) REFERENCES {ref_table}({ref_field});"
        )

    def drop_foreign_key(self, from_table: str, name: str) -> str:
        return f"ALTER TABLE {from_table} DROP CONSTRAINT {name};"

    def table_exists_query(self, table: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_TYPE = 'BASE TABLE' AND TABLE_NAME = ?",
            (table,),
        )

    def column_exists_query(self, table: str, column: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_NAME = ? AND COLUMN_NAME = ?",
            (table, column),
        )

    def index_exists_query(self, table: str, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM sys.indexes WHERE object_id = OBJECT_ID(?) AND name = ?",
            (table, name),
        )

    def foreign_key_exists_query(self, name: str) -> Query:
        return "SELECT COUNT(*) AS n FROM sys.foreign_keys WHERE name = ?", (name,)

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        if offset is None:
            top = f"TOP {limit} " if limit is not None else ""
            return f"SELECT {top}* FROM {table}{where}{order_by};"
        # OFFSET ... FETCH requires an ORDER BY
        order_by = order_by or " ORDER BY (SELECT NULL)"
        fetch = f" FETCH NEXT {limit} ROWS ONLY" if limit is not None else ""
        return f"SELECT * FROM {table}{where}{order_by} OFFSET {offset} ROWS{fetch};"

    def bool_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def string_literal(self, value: str) -> str:
        return "N" + _quote_sql_string(value)

    def format_timestamp(self, value: datetime) -> str:
        return _utc(value).strftime("%Y-%m-%d %H:%M:%S.%f")


class HDBDialect:
    """SAP HANA dialect: ``?`` placeholders (hdbcli), column tables, explicit sequences.

    HANA folds unquoted identifiers to upper case, so catalog lookups
    compare against upper-cased names.
    """

    _TYPES = {
        "int": "int",
        "int8": "tinyint",
        "int16": "smallint",
        "int32": "int",
        "int64": "bigint",
        "uint": "int",
        "uint8": "tinyint",
        "uint16": "int",
        "uint32": "bigint",
        "uint64": "bigint",
        "float32": "real",
        "float64": "double",
        "bool": "boolean",
        "str": "nvarchar(255)",
        "datetime": "timestamp",
    }

    name = "hdb"
    quote = ""
    increment = IncrementStrategy.SEQUENCE_OBJECT
    inline_increment_key = False
    supports_add_constraint = True
    auto_assign_placeholder = None
    default_placeholder = None

    def placeholder(self) -> str:
        return "?"

    def quote_identifier(self, ident: str) -> str:
        return ident

    def column_type(self, kind: str, increment: bool = False) -> str | None:  # noqa: ARG002
        return self._TYPES.get(kind)

    def increment_clause(self, start: int | None) -> str:  # noqa: ARG002
        return ""

    def now(self) -> str:
        return "CURRENT_UTCTIMESTAMP"

    def end_of_time(self) -> str:
        return "'9999-12-31 23:59:59.99999'"

    def default_clause(self, kind: str, value: str) -> str:
        return _default_clause(self, kind, value)

    def update_default(self, default_clause: str) -> str:
        return default_clause.removeprefix("DEFAULT ")

    def primary_key_clause(self, table: str, columns: Sequence[str]) -> str:  # noqa: ARG002
        return f"PRIMARY KEY ({_column_list(self, columns)})"

    def create_table(self, table: str, clauses: Sequence[str]) -> str:
        return f"CREATE COLUMN TABLE {table} ({', '.join(clauses)});"

    def add_columns(self, table: str, clauses: Sequence[str]) -> list[str]:
        return [f"ALTER TABLE {table} ADD ({', '.join(clauses)});"]

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE {table};"

    def create_index(self, name: str, table: str, columns: Sequence[str], unique: bool) -> str:
        kind = "UNIQUE INDEX" if unique else "INDEX"
        return f"CREATE {kind} {name} ON {table} ({', '.join(columns)});"

    def drop_index(self, table: str, name: str) -> str:  # noqa: ARG002
        return f"DROP INDEX {name};"

    def add_foreign_key(
        self, name: str, from_table: str, from_field: str, ref_table: str, ref_field: str
    ) -> str:
        return (
            f"ALTER TABLE {from_table} ADD CONSTRAINT {name} "
            f"FOREIGN KEY ({from_field}) REFERENCES {ref_table}({ref_field});"
        )

    def drop_foreign_key(self, from_table: str, name: str) -> str:
        return f"ALTER TABLE {from_table} DROP CONSTRAINT {name};"

    def table_exists_query(self, table: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM SYS.TABLES "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND TABLE_NAME = ?",
            (table.upper(),),
        )

    def column_exists_query(self, table: str, column: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM SYS.TABLE_COLUMNS "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND TABLE_NAME = ? AND COLUMN_NAME = ?",
            (table.upper(), column.upper()),
        )

    def index_exists_query(self, table: str, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM SYS.INDEXES "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND TABLE_NAME = ? AND INDEX_NAME = ?",
            (table.upper(), name.upper()),
        )

    def foreign_key_exists_query(self, name: str) -> Query:
        return (
            "SELECT COUNT(*) AS n FROM SYS.REFERENTIAL_CONSTRAINTS "
            "WHERE SCHEMA_NAME = CURRENT_SCHEMA AND CONSTRAINT_NAME = ?",
            (name.upper(),),
        )

    def select(
        self,
        table: str,
        where: str = "",
        order_by: str = "",
        limit: int | None = None,
        offset: int | None = None,
    ) -> str:
        paging = _limit_offset(limit, offset, "2147483647")
        return f"SELECT * FROM {table}{where}{order_by}{paging};"

    def bool_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def string_literal(self, value: str) -> str:
        return _quote_sql_string(value)

    def format_timestamp(self, value: datetime) -> str:
        return _utc(value).strftime("%Y-%m-%d %H:%M:%S.%f")


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, SchemaDialect] = {
    "postgres": PostgresDialect(),
    "mysql": MySQLDialect(),
    "sqlite": SQLiteDialect(),
    "mssql": MSSQLDialect(),
    "hdb": HDBDialect(),
}

_ALIASES = {
    "postgresql": "postgres",
    "pg": "postgres",
    "mariadb": "mysql",
    "sqlite3": "sqlite",
    "sqlserver": "mssql",
    "hana": "hdb",
}


def canonical_name(db_type: Any) -> str:
    """Canonical backend name for ``db_type`` or one of its aliases."""
    key = db_type.value if isinstance(db_type, Enum) else str(db_type)
    key = key.lower()
    return _ALIASES.get(key, key)


def get_dialect(db_type: Any) -> SchemaDialect:
    """Get a dialect by backend name.

    Raises:
        ConfigError: If ``db_type`` is not recognised.

    Example:
        >>> get_dialect("postgresql").placeholder()
        '%s'
    """
    key = canonical_name(db_type)
    if key not in _DIALECTS:
        raise ConfigError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: SchemaDialect) -> None:
    """Register a custom dialect implementation (test doubles, forks)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "IncrementStrategy",
    "SchemaDialect",
    "PostgresDialect",
    "MySQLDialect",
    "SQLiteDialect",
    "MSSQLDialect",
    "HDBDialect",
    "canonical_name",
    "get_dialect",
    "register_dialect",
]
