"""Dynamic SELECT construction from predicates and directives.

A query is an ordered list of :class:`Predicate` plus a directive mapping::

    engine.get_entities_with_commands(
        Depot,
        [Predicate("region", "=", "YYC"), Predicate("depot_num", ">", 90000010)],
        {"orderby": "depot_num", "desc": True, "limit": 4},
    )

Predicate values are always bound as parameters.  Paging syntax comes
from the dialect, so callers never see TOP, LIMIT or OFFSET ... FETCH.

Directives:

==========  ================================================================
limit       maximum number of rows (non-negative int)
offset      rows to skip (non-negative int)
orderby     field to order by; defaults to the primary-key columns
asc / desc  sort direction; ascending unless ``desc`` is set
count       return the number of matching rows instead of entities;
            ``limit``/``offset``/ordering are ignored
==========  ================================================================
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlspine.core.catalog import scalar
from sqlspine.core.dialect import SchemaDialect
from sqlspine.core.errors import ValidationError
from sqlspine.core.meta import FieldDescription, entity_class, extract_fields, zero_value
from sqlspine.core.naming import table_name_for
from sqlspine.core.protocols import Executor
from sqlspine.core.values import populate_entity, to_param

OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})
CONNECTORS = frozenset({"AND", "OR"})
DIRECTIVES = frozenset({"limit", "offset", "orderby", "asc", "desc", "count"})


@dataclass(frozen=True)
class Predicate:
    """One filter condition; ``connector`` joins it to the next predicate."""

    field: str
    operator: str
    value: Any
    connector: str = "AND"


class QueryBuilder:
    def __init__(self, executor: Executor, dialect: SchemaDialect):
        self._executor = executor
        self._dialect = dialect

    def get_entities(self, entity: Any) -> list[Any]:
        """Every row of the entity's table, in primary-key order."""
        return self.get_entities_with_commands(entity, [], {})

    def get_entities_with_commands(
        self,
        entity: Any,
        predicates: Sequence[Predicate] = (),
        directives: Mapping[str, Any] | None = None,
    ) -> list[Any] | int:
        cls = entity_class(entity)
        table = table_name_for(cls)
        fields = [fd for fd in extract_fields(cls) if not fd.no_db]
        directives = dict(directives or {})

        unknown = set(directives) - DIRECTIVES
        if unknown:
            raise ValidationError(
                f"unknown query directive(s): {sorted(unknown)}",
                field=sorted(unknown)[0],
                constraint="directive",
            )

        where, params = self.where_clause(fields, predicates)

        if _flag(directives, "count"):
            value = scalar(self._executor, f"SELECT COUNT(*) AS n FROM {table}{where};", params)
            return int(value or 0)

        limit = _non_negative(directives, "limit")
        offset = _non_negative(directives, "offset")
        sql = self._dialect.select(
            table, where, self.order_clause(fields, directives), limit, offset
        )
        rows = self._executor.query(sql, params)

        results = []
        for row in rows:
            instance = zero_value(cls)
            populate_entity(instance, fields, row)
            results.append(instance)
        return results

    # -- Clauses -----------------------------------------------------------

    def where_clause(
        self, fields: list[FieldDescription], predicates: Sequence[Predicate]
    ) -> tuple[str, tuple[Any, ...]]:
        if not predicates:
            return "", ()
        d = self._dialect
        terms: list[str] = []
        params: list[Any] = []
        for i, pred in enumerate(predicates):
            fd = _resolve_field(fields, pred.field)
            op = " ".join(pred.operator.upper().split())
            if op not in OPERATORS:
                raise ValidationError(
                    f"unsupported operator {pred.operator!r}",
                    field=pred.field,
                    value=pred.operator,
                    constraint="operator",
                )
            column = d.quote_identifier(fd.storage_name)
            if pred.value is None and op in ("=", "!=", "<>"):
                terms.append(f"{column} IS NULL" if op == "=" else f"{column} IS NOT NULL")
            else:
                terms.append(f"{column} {op} {d.placeholder()}")
                params.append(to_param(d, fd, pred.value))

            if i < len(predicates) - 1:
                connector = pred.connector.strip().upper()
                if connector not in CONNECTORS:
                    raise ValidationError(
                        f"unsupported connector {pred.connector!r}",
                        field=pred.field,
                        value=pred.connector,
                        constraint="connector",
                    )
                terms.append(connector)
        return " WHERE " + " ".join(terms), tuple(params)

    def order_clause(self, fields: list[FieldDescription], directives: Mapping[str, Any]) -> str:
        asc = _flag(directives, "asc")
        desc = _flag(directives, "desc")
        if asc and desc:
            raise ValidationError(
                "asc and desc are mutually exclusive", field="desc", constraint="direction"
            )
        direction = " DESC" if desc else ""

        orderby = directives.get("orderby")
        if orderby:
            columns = [_resolve_field(fields, str(orderby)).storage_name]
        else:
            columns = [fd.storage_name for fd in fields if fd.is_primary_key]
        if not columns:
            return ""
        quoted = (self._dialect.quote_identifier(c) + direction for c in columns)
        return " ORDER BY " + ", ".join(quoted)


def _resolve_field(fields: list[FieldDescription], name: str) -> FieldDescription:
    for fd in fields:
        if name in (fd.storage_name, fd.name):
            return fd
    raise ValidationError(f"unknown field {name!r}", field=name, constraint="field")


def _flag(directives: Mapping[str, Any], name: str) -> bool:
    return name in directives and directives[name] is not False


def _non_negative(directives: Mapping[str, Any], name: str) -> int | None:
    if name not in directives or directives[name] is None:
        return None
    raw = directives[name]
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw)
    else:
        value = None
    if value is None or value < 0:
        raise ValidationError(
            f"{name} must be a non-negative integer, got {raw!r}",
            field=name,
            value=raw,
            constraint="non_negative_int",
        )
    return value


__all__ = ["Predicate", "QueryBuilder", "OPERATORS", "CONNECTORS", "DIRECTIVES"]
