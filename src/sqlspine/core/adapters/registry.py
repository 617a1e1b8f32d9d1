"""Database adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names.  The registry
    maps backend names (and their aliases) to adapter classes, and the
    ``get_adapter()`` factory creates a configured instance from keyword
    arguments such as :meth:`SqlSpineSettings.adapter_kwargs` produces.

Tags:
    sqlspine, database, registry, factory, singleton
"""

from __future__ import annotations

from typing import Any

from sqlspine.core.dialect import canonical_name
from sqlspine.core.errors import ConfigError

from .base import DatabaseAdapter
from .hana import HANAAdapter
from .mssql import MSSQLAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter factories.

    Pre-registered adapters:
    - ``sqlite`` - :class:`SQLiteAdapter`
    - ``postgres`` - :class:`PostgreSQLAdapter`
    - ``mysql`` - :class:`MySQLAdapter`
    - ``mssql`` - :class:`MSSQLAdapter`
    - ``hdb`` - :class:`HANAAdapter`

    Lookups go through the dialect aliases, so ``postgresql``,
    ``sqlserver`` or ``hana`` find the same adapters.
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories[DatabaseType.SQLITE.value] = SQLiteAdapter
        self._factories[DatabaseType.POSTGRES.value] = PostgreSQLAdapter
        self._factories[DatabaseType.MYSQL.value] = MySQLAdapter
        self._factories[DatabaseType.MSSQL.value] = MSSQLAdapter
        self._factories[DatabaseType.HDB.value] = HANAAdapter

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name."""
        key = name.lower()
        if key not in self._factories:
            key = canonical_name(key)
        if key not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[key](**kwargs)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by type.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("postgresql", host="localhost", database="app")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
