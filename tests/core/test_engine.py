"""Tests for sqlspine.core.engine: the caller-facing surface."""

import logging
from datetime import datetime, timezone

import pytest
import structlog
from structlog.testing import capture_logs

from sqlspine import Engine, open_engine
from sqlspine.core.dialect import get_dialect
from sqlspine.core.engine import EngineOptions, LoggingExecutor
from sqlspine.core.errors import ConfigError
from sqlspine.core.settings import SqlSpineSettings

from tests._support.entities import Depot, SimpleDepot
from tests._support.recording import RecordingExecutor


class TestConstruction:
    def test_dialect_from_executor_name(self):
        assert Engine(RecordingExecutor("mysql")).dialect.name == "mysql"

    def test_explicit_dialect(self):
        engine = Engine(RecordingExecutor("custom"), dialect=get_dialect("postgres"))
        assert engine.get_db_name() == "postgres"

    def test_unknown_backend(self):
        with pytest.raises(ConfigError):
            Engine(RecordingExecutor("oracle"))

    def test_statement_logging_wraps_executor(self):
        engine = Engine(RecordingExecutor(), options=EngineOptions(log_statements=True))
        assert isinstance(engine.executor, LoggingExecutor)
        assert engine.executor.name == "postgres"


class TestBackendInfo:
    @pytest.mark.parametrize(
        ("backend", "quote"),
        [("postgres", ""), ("mysql", "`"), ("sqlite", '"'), ("mssql", ""), ("hdb", "")],
    )
    def test_quote(self, backend, quote):
        engine = Engine(RecordingExecutor(backend))
        assert engine.get_db_name() == backend
        assert engine.get_db_quote() == quote

    @pytest.mark.parametrize(
        ("backend", "true", "false"),
        [("postgres", "TRUE", "FALSE"), ("sqlite", "1", "0"), ("mssql", "1", "0")],
    )
    def test_bool_literals(self, backend, true, false):
        engine = Engine(RecordingExecutor(backend))
        assert engine.bool_to_db_bool(True) == true
        assert engine.bool_to_db_bool(False) == false

    def test_db_bool_to_bool(self):
        engine = Engine(RecordingExecutor())
        assert engine.db_bool_to_bool(b"1") is True
        assert engine.db_bool_to_bool("FALSE") is False

    def test_time_to_formatted_string(self):
        value = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
        assert Engine(RecordingExecutor("sqlite")).time_to_formatted_string(value) == (
            "2024-05-06 07:08:09"
        )


class TestLifecycle:
    def test_context_manager_closes_adapter(self, sqlite_adapter):
        with Engine(sqlite_adapter) as engine:
            engine.create_tables(SimpleDepot)
        assert sqlite_adapter.is_connected is False

    def test_close_without_disconnect(self):
        Engine(RecordingExecutor()).close()

    def test_pass_throughs(self, sqlite_engine):
        sqlite_engine.execute("CREATE TABLE t (id integer);")
        sqlite_engine.execute("INSERT INTO t (id) VALUES (?);", (4,))
        assert sqlite_engine.query_rows("SELECT id FROM t") == [{"id": 4}]
        assert sqlite_engine.query_row("SELECT id FROM t WHERE id = ?", (5,)) is None


class TestOpenEngine:
    def test_defaults_to_in_memory_sqlite(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SQLSPINE_DB_TYPE", raising=False)
        with capture_logs() as logs:
            engine = open_engine()
        with engine:
            assert engine.get_db_name() == "sqlite"
            engine.create_tables(Depot)
            assert engine.create(Depot()).depot_num == 90000000
        assert any(e["event"] == "engine_opened" and e["backend"] == "sqlite" for e in logs)

    def test_settings_become_options(self, tmp_path):
        settings = SqlSpineSettings(path=str(tmp_path / "app.db"), log_statements=True)
        with open_engine(settings) as engine:
            assert engine.options == EngineOptions(log_statements=True)
            with capture_logs() as logs:
                engine.create_tables(SimpleDepot)
        statements = [e["sql"] for e in logs if e["event"] == "sql_statement"]
        assert statements[0].startswith("CREATE TABLE depot")

    def test_log_level_filters_below_threshold(self, tmp_path):
        settings = SqlSpineSettings(path=str(tmp_path / "quiet.db"), log_level="ERROR")
        with capture_logs() as logs:
            engine = open_engine(settings)
        engine.close()
        wrapper = structlog.get_config()["wrapper_class"]
        assert wrapper is structlog.make_filtering_bound_logger(logging.ERROR)
        assert not [e for e in logs if e["event"] == "engine_opened"]

    def test_debug_level_lets_migration_decisions_through(self, tmp_path):
        settings = SqlSpineSettings(path=str(tmp_path / "loud.db"), log_level="debug")
        with open_engine(settings) as engine:
            with capture_logs() as logs:
                engine.alter_tables(SimpleDepot)
        plan = [e for e in logs if e["event"] == "alter_tables_plan"]
        assert plan == [
            {"event": "alter_tables_plan", "log_level": "debug", "create": ["depot"], "alter": []}
        ]


class TestBuildSchema:
    def test_build_schema_does_not_execute(self):
        ex = RecordingExecutor("postgres")
        result = Engine(ex).build_schema(SimpleDepot)
        assert result.table == "depot"
        assert result.primary_keys == ["depot_num"]
        assert ex.statements == []
