"""Tests for ``sqlspine.core.adapters.mssql`` - SQL Server adapter."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from sqlspine.core.adapters.mssql import MSSQLAdapter
from sqlspine.core.errors import ConfigError, DatabaseConnectionError


@pytest.fixture
def fake_pyodbc():
    module = MagicMock()
    module.Error = type("Error", (Exception,), {})
    with patch.dict(sys.modules, {"pyodbc": module}):
        yield module


class TestConnectionString:
    def test_with_credentials(self):
        adapter = MSSQLAdapter(host="db", database="app", username="sa", password="pw")
        assert adapter.connection_string() == (
            "DRIVER={ODBC Driver 18 for SQL Server};SERVER=db,1433;DATABASE=app;UID=sa;PWD=pw"
        )

    def test_extra_options_appended(self):
        adapter = MSSQLAdapter(
            host="db", database="app", driver="FreeTDS", TrustServerCertificate="yes"
        )
        assert adapter.connection_string() == (
            "DRIVER={FreeTDS};SERVER=db,1433;DATABASE=app;TrustServerCertificate=yes"
        )


class TestMSSQLAdapter:
    def test_connect(self, fake_pyodbc):
        adapter = MSSQLAdapter(host="db", database="app", username="sa", password="pw")
        adapter.connect()

        assert adapter.name == "mssql"
        fake_pyodbc.connect.assert_called_once_with(
            adapter.connection_string(), autocommit=True, timeout=10
        )

    def test_connect_failure(self, fake_pyodbc):
        fake_pyodbc.connect.side_effect = fake_pyodbc.Error("login failed")
        with pytest.raises(DatabaseConnectionError, match="SQL Server"):
            MSSQLAdapter().connect()

    def test_driver_missing(self):
        with patch.dict(sys.modules, {"pyodbc": None}):
            with pytest.raises(ConfigError, match="pyodbc"):
                MSSQLAdapter().connect()
