"""Tests for database adapter registration and lookup."""

from __future__ import annotations

import pytest

from sqlspine.core.adapters import (
    AdapterRegistry,
    DatabaseType,
    HANAAdapter,
    MSSQLAdapter,
    MySQLAdapter,
    PostgreSQLAdapter,
    SQLiteAdapter,
    adapter_registry,
    get_adapter,
)
from sqlspine.core.errors import ConfigError


class TestAdapterRegistry:
    def test_defaults_registered(self) -> None:
        assert adapter_registry.list_adapters() == ["hdb", "mssql", "mysql", "postgres", "sqlite"]

    @pytest.mark.parametrize(
        ("name", "cls"),
        [
            ("sqlite", SQLiteAdapter),
            ("postgres", PostgreSQLAdapter),
            ("postgresql", PostgreSQLAdapter),
            ("mariadb", MySQLAdapter),
            ("sqlserver", MSSQLAdapter),
            ("hana", HANAAdapter),
            ("HDB", HANAAdapter),
        ],
    )
    def test_aliases_resolve(self, name, cls) -> None:
        assert isinstance(adapter_registry.create(name), cls)

    def test_unknown_raises(self) -> None:
        with pytest.raises(ConfigError, match="Unknown database adapter"):
            get_adapter("oracle")

    def test_register_custom(self) -> None:
        registry = AdapterRegistry()

        class MemoryAdapter(SQLiteAdapter):
            pass

        registry.register("Memory", MemoryAdapter)
        assert isinstance(registry.create("memory"), MemoryAdapter)
        assert "memory" not in adapter_registry.list_adapters()


class TestGetAdapter:
    def test_by_enum(self) -> None:
        adapter = get_adapter(DatabaseType.SQLITE, path=":memory:")
        assert isinstance(adapter, SQLiteAdapter)

    def test_kwargs_forwarded(self) -> None:
        adapter = get_adapter("mssql", host="db", database="app", username="sa", password="pw")
        assert "SERVER=db,1433" in adapter.connection_string()

    @pytest.mark.parametrize("db_type", list(DatabaseType))
    def test_adapter_name_matches_dialect(self, db_type) -> None:
        from sqlspine.core.dialect import get_dialect

        adapter = get_adapter(db_type)
        assert get_dialect(adapter.name).name == db_type.value
