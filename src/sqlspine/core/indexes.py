"""Index and foreign-key management.

Index names come from annotations (see :mod:`sqlspine.core.schema`) or from
callers; foreign-key names are always derived from the four participating
identifiers, so existence can be checked without remembering anything.

Backends that cannot ``ALTER TABLE ... ADD CONSTRAINT`` (sqlite) get their
constraints through a table rebuild: the stored CREATE TABLE text is edited,
the data copied into a table built from the edited text, and the original
replaced.  Indexes and the AUTOINCREMENT counter survive the rebuild.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from sqlspine.core.catalog import exists, scalar
from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import SchemaError
from sqlspine.core.logging import get_logger
from sqlspine.core.naming import foreign_key_name, table_name_for
from sqlspine.core.protocols import Executor
from sqlspine.core.schema import IndexSpec

logger = get_logger(__name__)

_CREATE_TABLE_NAME = re.compile(r"^(\s*CREATE\s+TABLE\s+)[\"`\[]?\w+[\"`\]]?", re.IGNORECASE)


class IndexManager:
    """Creates, drops and checks indexes and foreign keys."""

    def __init__(self, executor: Executor, dialect: SchemaDialect):
        self._executor = executor
        self._dialect = dialect

    # -- Indexes -----------------------------------------------------------

    def exists_index(self, table: str, name: str) -> bool:
        return exists(self._executor, self._dialect.index_exists_query(table, name))

    def create_index(self, name: str, spec: IndexSpec) -> None:
        """Create ``name`` over ``spec.columns`` in the order they were recorded."""
        if not spec.columns:
            raise SchemaError(f"index {name!r} on {spec.table!r} has no columns")
        self._executor.execute(
            self._dialect.create_index(name, spec.table, spec.columns, spec.unique)
        )

    def drop_index(self, table: str, name: str) -> None:
        self._executor.execute(self._dialect.drop_index(table, name))

    # -- Foreign keys ------------------------------------------------------

    def exists_foreign_key_by_name(self, name: str) -> bool:
        return exists(self._executor, self._dialect.foreign_key_exists_query(name))

    def exists_foreign_key_by_fields(
        self, from_table: str, ref_table: str, from_field: str, ref_field: str  # noqa: ARG002
    ) -> bool:
        return self.exists_foreign_key_by_name(foreign_key_name(from_table, ref_table, ref_field))

    def create_foreign_key(
        self,
        entity: Any,
        from_table: str,
        ref_table: str,
        from_field: str,
        ref_field: str,
    ) -> None:
        """Create ``fk_<from>_<ref>_<reffield>``.

        ``from_table`` may be empty when ``entity`` is given; the entity's
        table name is used instead.
        """
        if not from_table and entity is not None:
            from_table = table_name_for(entity)
        name = foreign_key_name(from_table, ref_table, ref_field)
        ddl = self._dialect.add_foreign_key(name, from_table, from_field, ref_table, ref_field)
        logger.debug("foreign_key_create", name=name, table=from_table, references=ref_table)

        if self._dialect.supports_add_constraint:
            self._executor.execute(ddl)
            return
        self._rebuild(from_table, lambda sql: _append_constraint(sql, ddl))

    def drop_foreign_key(
        self, from_table: str, ref_table: str, from_field: str, ref_field: str  # noqa: ARG002
    ) -> None:
        name = foreign_key_name(from_table, ref_table, ref_field)
        ddl = self._dialect.drop_foreign_key(from_table, name)
        logger.debug("foreign_key_drop", name=name, table=from_table)

        if self._dialect.supports_add_constraint:
            self._executor.execute(ddl)
            return
        self._rebuild(from_table, lambda sql: _remove_constraint(sql, name))

    # -- Table rebuild (no ADD CONSTRAINT) ---------------------------------

    def _rebuild(self, table: str, edit: Callable[[str], str]) -> None:
        ex = self._executor
        row = ex.query_one(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        )
        if row is None or not row.get("sql"):
            raise SchemaError(f"table {table!r} does not exist").with_context(table=table)

        original = row["sql"]
        edited = edit(original)
        if edited == original:
            logger.debug("table_rebuild_skipped", table=table, reason="definition unchanged")
            return

        index_rows = ex.query(
            "SELECT sql FROM sqlite_master "
            "WHERE type = 'index' AND tbl_name = ? AND sql IS NOT NULL",
            (table,),
        )
        counter = self._sequence_value(table)
        fk_enforced = scalar(ex, "PRAGMA foreign_keys;", column="foreign_keys")
        tmp = f"{table}__rebuild"

        # foreign_keys cannot change inside a transaction
        ex.execute("PRAGMA foreign_keys = OFF;")
        try:
            ex.execute("BEGIN;")
            try:
                ex.execute(_CREATE_TABLE_NAME.sub(rf"\g<1>{tmp}", edited, count=1))
                ex.execute(f"INSERT INTO {tmp} SELECT * FROM {table};")
                ex.execute(f"DROP TABLE {table};")
                ex.execute(f"ALTER TABLE {tmp} RENAME TO {table};")
                for index_row in index_rows:
                    ex.execute(index_row["sql"])
                if counter is not None:
                    ex.execute("DELETE FROM sqlite_sequence WHERE name IN (?, ?);", (table, tmp))
                    ex.execute(
                        "INSERT INTO sqlite_sequence (name, seq) VALUES (?, ?);", (table, counter)
                    )
                ex.execute("COMMIT;")
            except Exception:
                ex.execute("ROLLBACK;")
                raise
        finally:
            if fk_enforced:
                ex.execute("PRAGMA foreign_keys = ON;")
        logger.debug("table_rebuilt", table=table, indexes=len(index_rows))

    def _sequence_value(self, table: str) -> Any:
        has_sequence_table = exists(
            self._executor,
            (
                "SELECT COUNT(*) AS n FROM sqlite_master "
                "WHERE type = 'table' AND name = 'sqlite_sequence'",
                (),
            ),
        )
        if not has_sequence_table:
            return None
        return scalar(
            self._executor, "SELECT seq AS n FROM sqlite_sequence WHERE name = ?", (table,)
        )


def _append_constraint(create_sql: str, clause: str) -> str:
    body = create_sql.rstrip().rstrip(";")
    close = body.rfind(")")
    if close < 0:
        raise SchemaError(f"cannot locate column list in {create_sql!r}")
    return f"{body[:close]}, {clause}{body[close:]}"


def _remove_constraint(create_sql: str, name: str) -> str:
    pattern = re.compile(
        rf",\s*CONSTRAINT\s+{re.escape(name)}\s+FOREIGN\s+KEY\s*\([^)]*\)\s*"
        rf"REFERENCES\s+[\"`]?\w+[\"`]?\s*\([^)]*\)",
        re.IGNORECASE,
    )
    return pattern.sub("", create_sql, count=1)


__all__ = ["IndexManager"]
