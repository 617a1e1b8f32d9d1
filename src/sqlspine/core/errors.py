"""
Structured error types for sqlspine.

Provides a typed error hierarchy carrying a category, a retry flag, a
structured context and an optional chained cause.  Every failure the engine
raises itself is a ``SqlSpineError``; errors raised by the database driver
while executing generated SQL are *not* wrapped and reach the caller exactly
as the driver raised them.

Manifesto:
    Schema generation fails in two very different ways.  A field type that
    cannot be mapped, an entity without a table name or an attempt to add a
    primary key through ALTER TABLE are *configuration* mistakes: continuing
    would leave the schema silently inconsistent, so they stop the operation
    immediately.  A constraint violation or a syntax rejection from the
    server is a *data* signal that belongs to the caller untouched.

    - **Typed hierarchy:** ConfigError vs ValidationError vs DatabaseError
    - **Retry flag:** set only on connection failures; nothing retries internally
    - **Rich context:** table/field/backend metadata for logging
    - **Error chaining:** ``cause=`` preserves the original exception

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       SqlSpineError                          │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │  ConfigError             ValidationError    DatabaseError    │
        │   NotARecordTypeError     SchemaError        EntityNotFound  │
        │   UnsupportedFieldType                                       │
        │   MissingTableName                                           │
        │   MissingPrimaryKey      DatabaseConnectionError             │
        │   PrimaryKeyAlteration                                       │
        │   FrozenEntity                                               │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> from sqlspine.core.errors import UnsupportedFieldTypeError
    >>> err = UnsupportedFieldTypeError("payload", "bytes", backend="postgres")
    >>> err.retryable
    False
    >>> err.to_dict()["category"]
    'CONFIG'

Tags:
    errors, exceptions, error-hierarchy, sqlspine, configuration-errors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"  # Connectivity, missing rows
    VALIDATION = "VALIDATION"  # Bad query input, schema mismatch
    CONFIG = "CONFIG"  # Entity metadata, settings, drivers
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        table: Table the operation targeted
        column: Storage name of the offending column, if any
        backend: Dialect name (``postgres``, ``mysql``, ...)
        statement: SQL statement being built or run
        metadata: Additional key-value pairs
    """

    table: str | None = None
    column: str | None = None
    backend: str | None = None
    statement: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "column", "backend", "statement"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SqlSpineError(Exception):
    """
    Base exception for all sqlspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.

    Examples:
        >>> error = SqlSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(table="depot").context.table
        'depot'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("bad annotation").with_context(
                table="depot", column="region"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONNECTION ERRORS
# =============================================================================


class DatabaseConnectionError(SqlSpineError):
    """Could not establish a connection to the database.

    The only error flagged retryable.  The engine never retries; the flag
    tells the caller that reconnecting may succeed.
    """

    default_category = ErrorCategory.DATABASE
    default_retryable = True


# =============================================================================
# VALIDATION ERRORS (Not Retryable)
# =============================================================================


class ValidationError(SqlSpineError):
    """
    Caller-supplied input was rejected before any SQL ran.

    Raised for unknown predicate fields, unsupported operators and
    malformed query directives.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.constraint:
            result["constraint"] = self.constraint
        return result


class SchemaError(ValidationError):
    """Live schema does not match what the entity metadata requires."""


# =============================================================================
# CONFIGURATION ERRORS (Fatal)
# =============================================================================


class ConfigError(SqlSpineError):
    """Configuration error: entity metadata, settings or driver setup."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class NotARecordTypeError(ConfigError):
    """The supplied entity is not a dataclass composed of named fields."""

    def __init__(self, obj: Any):
        name = getattr(obj, "__name__", type(obj).__name__)
        super().__init__(f"{name} is not a record type; entities must be dataclasses")
        self.obj = obj


class UnsupportedFieldTypeError(ConfigError):
    """A persisted field's type has no column type on the target backend."""

    def __init__(self, field_name: str, type_name: str, *, backend: str | None = None):
        where = f" on {backend}" if backend else ""
        super().__init__(
            f"field {field_name!r} has unsupported type {type_name!r}{where}",
            context=ErrorContext(column=field_name, backend=backend),
        )
        self.field_name = field_name
        self.type_name = type_name


class MissingTableNameError(ConfigError):
    """A table name could not be resolved for an operation."""


class MissingPrimaryKeyError(ConfigError):
    """A keyed operation was requested on an entity without a primary key."""

    def __init__(self, table: str):
        super().__init__(
            f"table {table!r} has no primary key; keyed operations are unavailable",
            context=ErrorContext(table=table),
        )


class FrozenEntityError(ConfigError):
    """CRUD writes values back into the entity, so it must not be frozen."""

    def __init__(self, type_name: str):
        super().__init__(
            f"{type_name} is a frozen dataclass; create, update and get write into the entity"
        )


class PrimaryKeyAlterationError(ConfigError):
    """Adding a primary-key column through ALTER TABLE is never permitted."""

    def __init__(self, table: str, column: str):
        super().__init__(
            f"cannot add primary-key column {column!r} to existing table {table!r}",
            context=ErrorContext(table=table, column=column),
        )


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SqlSpineError):
    """Result-shape failure detected by the engine (not a driver error)."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class EntityNotFoundError(DatabaseError):
    """No row matched the entity's primary key."""

    def __init__(self, table: str, keys: dict[str, Any]):
        super().__init__(
            f"no row in {table!r} matching {keys!r}",
            context=ErrorContext(table=table, metadata={"keys": dict(keys)}),
        )
        self.table = table
        self.keys = dict(keys)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SqlSpineError",
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
