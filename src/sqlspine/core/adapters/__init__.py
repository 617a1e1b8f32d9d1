"""Database adapters -- the connection collaborator for 5 backends.

Manifesto:
    The engine consumes four primitives (``execute``, ``query_one``,
    ``query``, ``name``) and nothing else.  Adapters supply them over a
    single DB-API connection per backend, in autocommit mode.

    Each adapter is **import-guarded**: the database driver is only required at
    ``connect()`` time, not at import time.  Install the corresponding extra::

        pip install sqlspine[postgres]   # psycopg2-binary
        pip install sqlspine[mysql]      # mysql-connector-python
        pip install sqlspine[mssql]      # pyodbc
        pip install sqlspine[hana]       # hdbcli

Architecture::

    DatabaseAdapter (base.py)        Abstract base with connect/execute/query
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- PostgreSQLAdapter        psycopg2 (optional)
        |-- MySQLAdapter             mysql.connector (optional)
        |-- MSSQLAdapter             pyodbc (optional)
        |-- HANAAdapter              hdbcli (optional)

    AdapterRegistry (registry.py)    Singleton: backend name -> adapter class
    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``
    ❌ ``adapter = PostgreSQLAdapter(...)`` scattered through callers
    ✅ ``adapter = get_adapter(settings.db_type, **settings.adapter_kwargs())``

Tags:
    sqlspine, database, adapters, multi-backend, import-guarded,
    registry-pattern, postgres, sqlite, mysql, mssql, hana
"""

from sqlspine.core.protocols import Connection

from .base import DatabaseAdapter
from .hana import HANAAdapter
from .mssql import MSSQLAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    "Connection",
    # Base class
    "DatabaseAdapter",
    # Implementations
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "MSSQLAdapter",
    "HANAAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
