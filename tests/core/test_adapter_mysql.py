"""Tests for ``sqlspine.core.adapters.mysql`` - MySQL adapter."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from sqlspine.core.adapters.mysql import MySQLAdapter
from sqlspine.core.errors import ConfigError, DatabaseConnectionError


@pytest.fixture
def fake_connector():
    connector = MagicMock()
    connector.Error = type("Error", (Exception,), {})
    package = MagicMock()
    package.connector = connector
    with patch.dict(sys.modules, {"mysql": package, "mysql.connector": connector}):
        yield connector


class TestMySQLAdapter:
    def test_connect(self, fake_connector):
        adapter = MySQLAdapter(host="db", database="inventory", username="app", password="pw")
        adapter.connect()

        assert adapter.name == "mysql"
        fake_connector.connect.assert_called_once_with(
            host="db",
            port=3306,
            database="inventory",
            user="app",
            password="pw",
            connect_timeout=10,
            autocommit=True,
            charset="utf8mb4",
        )

    def test_buffered_cursor(self, fake_connector):
        adapter = MySQLAdapter(database="inventory")
        adapter.connect()
        adapter.execute("SELECT 1;")
        fake_connector.connect.return_value.cursor.assert_called_with(buffered=True)

    def test_connect_failure(self, fake_connector):
        fake_connector.connect.side_effect = fake_connector.Error("Access denied")
        with pytest.raises(DatabaseConnectionError, match="MySQL"):
            MySQLAdapter().connect()

    def test_driver_missing(self):
        with patch.dict(sys.modules, {"mysql": None, "mysql.connector": None}):
            with pytest.raises(ConfigError, match="mysql-connector-python"):
                MySQLAdapter().connect()
