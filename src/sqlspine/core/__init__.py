"""sqlspine core -- one entity model, five SQL backends.

Manifesto:
    Applications describe their tables once, as annotated dataclasses,
    and get the same schema, migration, CRUD and query behaviour on
    Postgres, MySQL, SQLite, SQL Server and SAP HANA.  Every backend
    difference lives in one dialect; everything that touches the
    database goes through one executor.

    - **Dataclass entities:** field annotations carry keys, defaults, indexes
    - **Dialect-per-backend:** no engine code branches on a backend name
    - **Stateless calls:** the live catalog is re-read on every operation
    - **Explicit configuration:** no global switches, options are passed in

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (SqlSpineError, ConfigError)
        protocols.py       Executor / Connection protocols
        naming.py          Column, table, index and foreign-key naming

    Layer 2 -- Metadata & SQL generation
        meta.py            Dataclass metadata extraction, zero values
        dialect.py         SchemaDialect protocol + 5 implementations
        schema.py          SchemaBuilder -> SchemaBuildResult
        values.py          Literal / parameter / result conversion

    Layer 3 -- Operations
        catalog.py         Existence checks through an executor
        sequences.py       Five key-generation strategies
        indexes.py         Indexes and foreign keys (incl. sqlite rebuild)
        migration.py       Create / alter / drop / reset tables
        crud.py            Create / update / delete / get one entity
        query.py           Predicate + directive SELECTs
        engine.py          Engine facade + open_engine()

    Layer 4 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        SqlSpineSettings (pydantic-settings)
        adapters/          DB-API adapters for the 5 backends
"""

from sqlspine.core.crud import CrudContext, CrudEngine, CrudMode
from sqlspine.core.dialect import (
    HDBDialect,
    IncrementStrategy,
    MSSQLDialect,
    MySQLDialect,
    PostgresDialect,
    SchemaDialect,
    SQLiteDialect,
    get_dialect,
    register_dialect,
)
from sqlspine.core.engine import Engine, EngineOptions, open_engine
from sqlspine.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    EntityNotFoundError,
    FrozenEntityError,
    ErrorCategory,
    ErrorContext,
    MissingPrimaryKeyError,
    MissingTableNameError,
    NotARecordTypeError,
    PrimaryKeyAlterationError,
    SchemaError,
    SqlSpineError,
    UnsupportedFieldTypeError,
    ValidationError,
)
from sqlspine.core.meta import (
    ZERO_TIME,
    FieldDescription,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    column,
    extract_fields,
)
from sqlspine.core.migration import Migrator, PendingForeignKey
from sqlspine.core.naming import camel_to_snake, foreign_key_name, index_name, table_name_for
from sqlspine.core.protocols import Executor
from sqlspine.core.query import Predicate, QueryBuilder
from sqlspine.core.schema import (
    ForeignKeySpec,
    IndexSpec,
    SchemaBuilder,
    SchemaBuildResult,
    SequenceSpec,
)
from sqlspine.core.sequences import SequenceManager, sequence_manager_for
from sqlspine.core.settings import SqlSpineSettings

__all__ = [
    # Engine
    "Engine",
    "EngineOptions",
    "open_engine",
    "SqlSpineSettings",
    # Entities
    "column",
    "extract_fields",
    "FieldDescription",
    "ZERO_TIME",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    # Naming
    "camel_to_snake",
    "table_name_for",
    "index_name",
    "foreign_key_name",
    # Dialects
    "SchemaDialect",
    "IncrementStrategy",
    "PostgresDialect",
    "MySQLDialect",
    "SQLiteDialect",
    "MSSQLDialect",
    "HDBDialect",
    "get_dialect",
    "register_dialect",
    # Building blocks
    "Executor",
    "SchemaBuilder",
    "SchemaBuildResult",
    "IndexSpec",
    "SequenceSpec",
    "ForeignKeySpec",
    "Migrator",
    "PendingForeignKey",
    "SequenceManager",
    "sequence_manager_for",
    "CrudEngine",
    "CrudContext",
    "CrudMode",
    "QueryBuilder",
    "Predicate",
    # Errors
    "SqlSpineError",
    "ErrorCategory",
    "ErrorContext",
    "DatabaseConnectionError",
    "ValidationError",
    "SchemaError",
    "ConfigError",
    "NotARecordTypeError",
    "UnsupportedFieldTypeError",
    "MissingTableNameError",
    "MissingPrimaryKeyError",
    "FrozenEntityError",
    "PrimaryKeyAlterationError",
    "DatabaseError",
    "EntityNotFoundError",
]
