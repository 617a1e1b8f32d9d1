"""SAP HANA database adapter.

Uses ``hdbcli``, SAP's DB-API driver.  HANA uses **qmark** (``?``)
placeholder style and reports column names in upper case; the base
adapter lower-cases them so they match storage names.

Install the driver::

    pip install hdbcli
    # or:  pip install sqlspine[hana]
"""

from __future__ import annotations

from typing import Any

from sqlspine.core.errors import ConfigError, DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class HANAAdapter(DatabaseAdapter):
    """SAP HANA database adapter (single autocommit connection)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 30015,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.HDB,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            options=kwargs,
        )
        super().__init__(config)

    def connect(self) -> None:
        """Connect to SAP HANA."""
        try:
            from hdbcli import dbapi
        except ImportError:
            raise ConfigError(
                "hdbcli is required for SAP HANA. Install with: pip install hdbcli"
            ) from None

        options = dict(self._config.options)
        if self._config.database:
            options.setdefault("databaseName", self._config.database)
        try:
            self._conn = dbapi.connect(
                address=self._config.host,
                port=self._config.port,
                user=self._config.username,
                password=self._config.password,
                **options,
            )
            self._conn.setautocommit(True)
        except dbapi.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SAP HANA: {e}",
                cause=e,
            ) from e

    def _begin(self, conn: Any) -> None:
        conn.setautocommit(False)

    def _end(self, conn: Any) -> None:
        conn.setautocommit(True)


__all__ = [
    "HANAAdapter",
]
