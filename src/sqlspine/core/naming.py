"""Identifier naming rules.

Declared field names become storage (column) names through
:func:`camel_to_snake`; entity classes become table names through
:func:`table_name_for`.  Index and foreign-key names are derived
deterministically so their existence can be checked without stored state.

These translations are bit-exact contracts: hand-written migration SQL
must agree with the generated DDL on every column name.

Examples:
    >>> camel_to_snake("testCamelCaseIBMPowerEdge")
    'test_camel_case_ibm_power_edge'
    >>> camel_to_snake("IOneTwo")
    'i_one_two'
    >>> foreign_key_name("product", "warehouse", "id")
    'fk_product_warehouse_id'
"""

from __future__ import annotations

import re
from typing import Any

from sqlspine.core.errors import ConfigError, MissingTableNameError

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    """Convert a camel-style identifier to lower snake case.

    A run of capitals followed by a capital+lowercase boundary splits
    before the last capital (``IBMPowerEdge`` -> ``ibm_power_edge``).
    Names that are already snake case pass through unchanged.
    """
    s = _FIRST_CAP.sub(r"\1_\2", name)
    s = _ALL_CAP.sub(r"\1_\2", s)
    return s.lower()


def table_name_for(entity: Any) -> str:
    """Table name for an entity class or instance.

    An explicit ``__tablename__`` class attribute wins; otherwise the
    class name is lower-cased as-is (``GetCmdTest`` -> ``getcmdtest``).
    """
    cls = entity if isinstance(entity, type) else type(entity)
    name = getattr(cls, "__tablename__", None) or cls.__name__.lower()
    if not name:
        raise MissingTableNameError(f"no table name could be derived for {cls!r}")
    return name


def index_name(table: str, column: str) -> str:
    """Name of the single-column index created by ``index:unique|non-unique``."""
    return f"idx_{table}_{column}"


def foreign_key_name(from_table: str, ref_table: str, ref_field: str) -> str:
    """Deterministic foreign-key name ``fk_<fromTable>_<refTable>_<refField>``."""
    if not from_table or not ref_table or not ref_field:
        raise ConfigError(
            "foreign key name requires from table, referenced table and referenced field; "
            f"got {from_table!r}, {ref_table!r}, {ref_field!r}"
        )
    return f"fk_{from_table}_{ref_table}_{ref_field}"


def sequence_name(table: str, column: str) -> str:
    """Implicit sequence name Postgres assigns to a serial column."""
    return f"{table}_{column}_seq"


__all__ = [
    "camel_to_snake",
    "table_name_for",
    "index_name",
    "foreign_key_name",
    "sequence_name",
]
