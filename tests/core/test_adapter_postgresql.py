"""Tests for ``sqlspine.core.adapters.postgresql`` - PostgreSQL adapter."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from sqlspine.core.adapters.postgresql import PostgreSQLAdapter
from sqlspine.core.errors import ConfigError, DatabaseConnectionError


@pytest.fixture
def fake_psycopg2():
    module = MagicMock()
    module.Error = type("Error", (Exception,), {})
    with patch.dict(sys.modules, {"psycopg2": module}):
        yield module


class TestPostgreSQLAdapterInit:
    def test_default_config(self):
        adapter = PostgreSQLAdapter()
        assert adapter.name == "postgres"
        assert adapter.is_connected is False


class TestPostgreSQLAdapterConnect:
    def test_connect_success(self, fake_psycopg2):
        adapter = PostgreSQLAdapter(
            host="db.example.com", port=5433, database="inventory", username="app", password="pw"
        )
        adapter.connect()

        assert adapter.is_connected is True
        fake_psycopg2.connect.assert_called_once_with(
            host="db.example.com",
            port=5433,
            dbname="inventory",
            user="app",
            password="pw",
            connect_timeout=10,
        )
        assert fake_psycopg2.connect.return_value.autocommit is True

    def test_connect_failure(self, fake_psycopg2):
        fake_psycopg2.connect.side_effect = fake_psycopg2.Error("Connection refused")
        adapter = PostgreSQLAdapter(host="bad-host", database="inventory")
        with pytest.raises(DatabaseConnectionError, match="Failed to connect") as exc:
            adapter.connect()
        assert exc.value.retryable is True

    def test_driver_missing(self):
        with patch.dict(sys.modules, {"psycopg2": None}):
            with pytest.raises(ConfigError, match="psycopg2-binary"):
                PostgreSQLAdapter().connect()


class TestPostgreSQLAdapterDisconnect:
    def test_disconnect(self, fake_psycopg2):
        adapter = PostgreSQLAdapter(database="inventory")
        adapter.connect()
        conn = fake_psycopg2.connect.return_value
        adapter.disconnect()
        assert adapter.is_connected is False
        conn.close.assert_called_once()

    def test_disconnect_when_not_connected(self):
        PostgreSQLAdapter().disconnect()


class TestPostgreSQLAdapterExecute:
    def test_query_rows_as_dicts(self, fake_psycopg2):
        cursor = fake_psycopg2.connect.return_value.cursor.return_value
        cursor.description = [("ID",), ("region",)]
        cursor.fetchall.return_value = [(1, "YYC")]

        adapter = PostgreSQLAdapter(database="inventory")
        adapter.connect()
        rows = adapter.query("SELECT * FROM depot WHERE id = %s", (1,))

        assert rows == [{"id": 1, "region": "YYC"}]
        cursor.execute.assert_called_once_with("SELECT * FROM depot WHERE id = %s", (1,))
        cursor.close.assert_called_once()

    def test_execute_without_params(self, fake_psycopg2):
        cursor = fake_psycopg2.connect.return_value.cursor.return_value
        cursor.rowcount = 3

        adapter = PostgreSQLAdapter(database="inventory")
        adapter.connect()

        assert adapter.execute("DELETE FROM depot;") == 3
        cursor.execute.assert_called_once_with("DELETE FROM depot;")

    def test_transaction_toggles_autocommit(self, fake_psycopg2):
        conn = fake_psycopg2.connect.return_value
        adapter = PostgreSQLAdapter(database="inventory")
        adapter.connect()

        with adapter.transaction():
            assert conn.autocommit is False
        conn.commit.assert_called_once()
        assert conn.autocommit is True

    def test_transaction_rolls_back(self, fake_psycopg2):
        conn = fake_psycopg2.connect.return_value
        adapter = PostgreSQLAdapter(database="inventory")
        adapter.connect()

        with pytest.raises(RuntimeError):
            with adapter.transaction():
                raise RuntimeError("boom")
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
