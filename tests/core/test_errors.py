"""Tests for sqlspine.core.errors module."""

import pytest

from sqlspine.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    EntityNotFoundError,
    FrozenEntityError,
    ErrorCategory,
    ErrorContext,
    MissingPrimaryKeyError,
    NotARecordTypeError,
    PrimaryKeyAlterationError,
    SchemaError,
    SqlSpineError,
    UnsupportedFieldTypeError,
    ValidationError,
)


class TestErrorContext:
    def test_empty_context(self):
        ctx = ErrorContext()
        assert ctx.table is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_skips_none_and_merges_metadata(self):
        ctx = ErrorContext(table="depot", backend="sqlite", metadata={"keys": {"id": 1}})
        assert ctx.to_dict() == {"table": "depot", "backend": "sqlite", "keys": {"id": 1}}


class TestSqlSpineError:
    def test_defaults(self):
        err = SqlSpineError("boom")
        assert err.category is ErrorCategory.INTERNAL
        assert err.retryable is False
        assert str(err) == "boom"

    def test_with_context_known_and_extra_keys(self):
        err = SqlSpineError("boom").with_context(table="depot", attempt=2)
        assert err.context.table == "depot"
        assert err.context.metadata == {"attempt": 2}

    def test_cause_chained(self):
        cause = RuntimeError("driver")
        err = SqlSpineError("wrapped", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "driver"

    def test_to_dict(self):
        err = ConfigError("bad").with_context(table="depot")
        assert err.to_dict() == {
            "error_type": "ConfigError",
            "message": "bad",
            "category": "CONFIG",
            "retryable": False,
            "context": {"table": "depot"},
        }

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            NotARecordTypeError(42),
            UnsupportedFieldTypeError("payload", "bytes", backend="postgres"),
            MissingPrimaryKeyError("keyless"),
            PrimaryKeyAlterationError("keyed", "region"),
        ],
    )
    def test_configuration_errors_fatal(self, error):
        assert isinstance(error, ConfigError)
        assert error.category is ErrorCategory.CONFIG
        assert error.retryable is False

    def test_connection_errors_retryable(self):
        err = DatabaseConnectionError("refused")
        assert err.retryable is True
        assert err.category is ErrorCategory.DATABASE

    def test_only_connection_errors_retryable(self):
        retryable = [
            cls
            for cls in (ConfigError, ValidationError, DatabaseError, DatabaseConnectionError)
            if cls("x").retryable
        ]
        assert retryable == [DatabaseConnectionError]

    def test_schema_error_is_validation(self):
        assert isinstance(SchemaError("drift"), ValidationError)

    def test_validation_error_fields(self):
        err = ValidationError("bad op", field="region", value="~", constraint="operator")
        assert err.to_dict()["field"] == "region"
        assert err.to_dict()["constraint"] == "operator"

    def test_entity_not_found(self):
        err = EntityNotFoundError("depot", {"depot_num": 1})
        assert isinstance(err, DatabaseError)
        assert err.keys == {"depot_num": 1}
        assert err.context.to_dict() == {"table": "depot", "keys": {"depot_num": 1}}

    def test_unsupported_field_context(self):
        err = UnsupportedFieldTypeError("payload", "bytes", backend="hdb")
        assert err.context.column == "payload"
        assert "on hdb" in str(err)

    def test_not_a_record_names_the_type(self):
        assert "int is not a record type" in str(NotARecordTypeError(42))

    def test_frozen_entity_names_the_type(self):
        err = FrozenEntityError("Point")
        assert isinstance(err, ConfigError)
        assert str(err).startswith("Point is a frozen dataclass")
