"""Tests for sqlspine.core.query: predicates, directives and paging."""

import pytest

from sqlspine.core.engine import Engine
from sqlspine.core.errors import ValidationError
from sqlspine.core.query import Predicate

from tests._support.entities import Depot, GetCmdTest
from tests._support.recording import RecordingExecutor


@pytest.fixture
def engine(sqlite_engine):
    sqlite_engine.create_tables(GetCmdTest)
    for i in range(1, 9):
        sqlite_engine.create(GetCmdTest(fld_one_int=i, fld_two_str=f"row{i}"))
    return sqlite_engine


def ids(rows):
    return [r.id for r in rows]


class TestDirectives:
    def test_all_rows_in_key_order(self, engine):
        assert ids(engine.get_entities(GetCmdTest)) == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_limit(self, engine):
        assert ids(engine.get_entities_with_commands(GetCmdTest, [], {"limit": 4})) == [1, 2, 3, 4]

    def test_desc(self, engine):
        rows = engine.get_entities_with_commands(GetCmdTest, [], {"desc": True, "limit": 2})
        assert ids(rows) == [8, 7]

    def test_offset_without_limit(self, engine):
        rows = engine.get_entities_with_commands(GetCmdTest, [], {"offset": 2})
        assert ids(rows) == [3, 4, 5, 6, 7, 8]

    def test_limit_and_offset(self, engine):
        rows = engine.get_entities_with_commands(GetCmdTest, [], {"limit": 4, "offset": 2})
        assert ids(rows) == [3, 4, 5, 6]

    def test_orderby_field(self, engine):
        rows = engine.get_entities_with_commands(
            GetCmdTest, [], {"orderby": "fld_two_str", "desc": True}
        )
        assert rows[0].fld_two_str == "row8"

    def test_count_ignores_paging(self, engine):
        count = engine.get_entities_with_commands(
            GetCmdTest, [], {"count": True, "limit": 2, "offset": 1}
        )
        assert count == 8

    def test_limit_from_digit_string(self, engine):
        assert len(engine.get_entities_with_commands(GetCmdTest, [], {"limit": "3"})) == 3

    def test_false_flag_ignored(self, engine):
        assert len(engine.get_entities_with_commands(GetCmdTest, [], {"count": False})) == 8


class TestPredicates:
    def test_comparison(self, engine):
        rows = engine.get_entities_with_commands(GetCmdTest, [Predicate("fld_one_int", ">", 4)])
        assert ids(rows) == [5, 6, 7, 8]

    def test_count_with_predicate(self, engine):
        count = engine.get_entities_with_commands(
            GetCmdTest, [Predicate("fld_one_int", "<=", 3)], {"count": True}
        )
        assert count == 3

    def test_or_connector(self, engine):
        rows = engine.get_entities_with_commands(
            GetCmdTest,
            [Predicate("fld_one_int", "=", 1, "OR"), Predicate("fld_one_int", "=", 8)],
        )
        assert ids(rows) == [1, 8]

    def test_and_connector_by_default(self, engine):
        rows = engine.get_entities_with_commands(
            GetCmdTest,
            [Predicate("fld_one_int", ">", 2), Predicate("fld_one_int", "<", 5)],
        )
        assert ids(rows) == [3, 4]

    def test_like(self, engine):
        rows = engine.get_entities_with_commands(
            GetCmdTest, [Predicate("fld_two_str", "like", "row%")], {"count": True}
        )
        assert rows == 8

    def test_none_becomes_is_null(self, sqlite_engine):
        sqlite_engine.create_tables(Depot)
        sqlite_engine.create(Depot(note="a"))
        sqlite_engine.create(Depot())
        null_count = sqlite_engine.get_entities_with_commands(
            Depot, [Predicate("note", "=", None)], {"count": True}
        )
        not_null_count = sqlite_engine.get_entities_with_commands(
            Depot, [Predicate("note", "!=", None)], {"count": True}
        )
        assert (null_count, not_null_count) == (1, 1)

    def test_no_matches(self, engine):
        assert engine.get_entities_with_commands(GetCmdTest, [Predicate("id", ">", 100)]) == []


class TestValidation:
    @pytest.mark.parametrize(
        ("predicates", "directives", "constraint"),
        [
            ([], {"top": 3}, "directive"),
            ([Predicate("missing", "=", 1)], {}, "field"),
            ([Predicate("id", "~", 1)], {}, "operator"),
            ([Predicate("id", "=", 1, "XOR"), Predicate("id", "=", 2)], {}, "connector"),
            ([], {"limit": -1}, "non_negative_int"),
            ([], {"offset": "two"}, "non_negative_int"),
            ([], {"limit": True}, "non_negative_int"),
            ([], {"asc": True, "desc": True}, "direction"),
            ([], {"orderby": "missing"}, "field"),
        ],
    )
    def test_rejected(self, predicates, directives, constraint):
        ex = RecordingExecutor("postgres")
        with pytest.raises(ValidationError) as exc:
            Engine(ex).get_entities_with_commands(GetCmdTest, predicates, directives)
        assert exc.value.constraint == constraint
        assert ex.statements == []


class TestGeneratedSql:
    @pytest.mark.parametrize(
        ("backend", "expected"),
        [
            ("postgres", "SELECT * FROM getcmdtest ORDER BY id LIMIT 4;"),
            ("mysql", "SELECT * FROM getcmdtest ORDER BY `id` LIMIT 4;"),
            ("mssql", "SELECT TOP 4 * FROM getcmdtest ORDER BY id;"),
            ("hdb", "SELECT * FROM getcmdtest ORDER BY id LIMIT 4;"),
        ],
    )
    def test_limit(self, backend, expected):
        ex = RecordingExecutor(backend)
        Engine(ex).get_entities_with_commands(GetCmdTest, [], {"limit": 4})
        assert ex.sqls == [expected]

    @pytest.mark.parametrize(
        ("backend", "expected"),
        [
            ("postgres", "SELECT * FROM getcmdtest ORDER BY id LIMIT 4 OFFSET 2;"),
            (
                "mssql",
                "SELECT * FROM getcmdtest ORDER BY id OFFSET 2 ROWS FETCH NEXT 4 ROWS ONLY;",
            ),
        ],
    )
    def test_limit_and_offset(self, backend, expected):
        ex = RecordingExecutor(backend)
        Engine(ex).get_entities_with_commands(GetCmdTest, [], {"limit": 4, "offset": 2})
        assert ex.sqls == [expected]

    @pytest.mark.parametrize(
        ("backend", "expected"),
        [
            ("postgres", "SELECT * FROM getcmdtest ORDER BY id OFFSET 2;"),
            ("mysql", "SELECT * FROM getcmdtest ORDER BY `id` LIMIT 18446744073709551615 OFFSET 2;"),
            ("mssql", "SELECT * FROM getcmdtest ORDER BY id OFFSET 2 ROWS;"),
            ("hdb", "SELECT * FROM getcmdtest ORDER BY id LIMIT 2147483647 OFFSET 2;"),
        ],
    )
    def test_offset_only(self, backend, expected):
        ex = RecordingExecutor(backend)
        Engine(ex).get_entities_with_commands(GetCmdTest, [], {"offset": 2})
        assert ex.sqls == [expected]

    def test_bound_parameters(self):
        ex = RecordingExecutor("postgres")
        Engine(ex).get_entities_with_commands(
            GetCmdTest, [Predicate("fld_two_str", "=", "x'; DROP TABLE t; --")], {"desc": True}
        )
        assert ex.statements == [
            (
                "SELECT * FROM getcmdtest WHERE fld_two_str = %s ORDER BY id DESC;",
                ("x'; DROP TABLE t; --",),
            )
        ]

    def test_count_statement(self):
        ex = RecordingExecutor("mssql")
        ex.respond("COUNT(*)", [{"n": 5}])
        count = Engine(ex).get_entities_with_commands(
            GetCmdTest, [Predicate("fld_one_int", ">", 4)], {"count": True}
        )
        assert count == 5
        assert ex.statements == [
            ("SELECT COUNT(*) AS n FROM getcmdtest WHERE fld_one_int > ?;", (4,))
        ]

    def test_rows_converted(self):
        ex = RecordingExecutor("mysql")
        ex.respond(
            "SELECT * FROM getcmdtest",
            [{"id": bytearray(b"3"), "fld_one_int": "7", "fld_two_str": bytearray(b"abc")}],
        )
        (row,) = Engine(ex).get_entities(GetCmdTest)
        assert (row.id, row.fld_one_int, row.fld_two_str) == (3, 7, "abc")
