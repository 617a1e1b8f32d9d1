"""Metadata extraction from annotated dataclass entities.

An entity type is an ordinary ``@dataclass``.  Each field may carry an
annotation string under ``metadata["sqlspine"]`` (use :func:`column` to
attach one) describing its persistence behaviour::

    @dataclass
    class Depot:
        depot_num: int = column("primary_key:inc;start:90000000")
        region: str = column("nullable:false;default:YYC")
        notes: str = column("-")              # not persisted

Annotation clauses are ``;``-separated ``name:value`` pairs:

    ==============  =========================================
    primary_key     ``primary_key:inc`` or ``primary_key:``
    start           first value of an incrementing key
    default         literal, ``now()`` or ``eot``
    nullable        ``true`` or ``false``
    constraint      ``unique``
    index           ``unique``, ``non-unique`` or an index name
    fkey            ``<reftable>(<reffield>)``
    ==============  =========================================

A bare ``-`` marks the field as not persisted.

:func:`extract_fields` turns an entity type into an ordered list of
:class:`FieldDescription`; embedded dataclass fields are flattened in
place so their columns appear where the embedding field was declared.
"""

from __future__ import annotations

import dataclasses
import inspect
import sys
import types
import typing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, NewType, Union

from sqlspine.core.errors import ConfigError, NotARecordTypeError
from sqlspine.core.naming import camel_to_snake

ANNOTATION_KEY = "sqlspine"
NOT_PERSISTED = "-"

# Width markers for declared types.  They are plain ints/floats at runtime.
Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt = NewType("UInt", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_KINDS: dict[Any, str] = {
    int: "int",
    Int8: "int8",
    Int16: "int16",
    Int32: "int32",
    Int64: "int64",
    UInt: "uint",
    UInt8: "uint8",
    UInt16: "uint16",
    UInt32: "uint32",
    UInt64: "uint64",
    float: "float64",
    Float32: "float32",
    Float64: "float64",
    bool: "bool",
    str: "str",
    datetime: "datetime",
}

INT_KINDS = frozenset(
    {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"}
)
FLOAT_KINDS = frozenset({"float32", "float64"})

_ZERO_BY_KIND: dict[str, Any] = {
    **{k: 0 for k in INT_KINDS},
    **{k: 0.0 for k in FLOAT_KINDS},
    "bool": False,
    "str": "",
    "datetime": ZERO_TIME,
}


@dataclass(frozen=True)
class Attribute:
    """One ``name:value`` clause from a field annotation."""

    name: str
    value: str


@dataclass(frozen=True)
class FieldDescription:
    """Normalized description of one entity field.

    ``kind`` is ``None`` when the underlying type has no mapping; the
    schema builder rejects such fields unless they are not persisted.
    ``column_type`` is filled in by the schema builder once the backend
    type has been resolved.
    """

    name: str
    storage_name: str
    declared_type: Any
    underlying_type: Any
    kind: str | None
    optional: bool
    no_db: bool
    attributes: tuple[Attribute, ...]
    path: tuple[str, ...]
    column_type: str | None = None

    def attribute(self, name: str) -> str | None:
        """Value of the first attribute pair called ``name``."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.value
        return None

    def has_attribute(self, name: str) -> bool:
        return any(attr.name == name for attr in self.attributes)

    @property
    def is_primary_key(self) -> bool:
        return self.has_attribute("primary_key")

    @property
    def is_increment(self) -> bool:
        return self.attribute("primary_key") == "inc"

    @property
    def default(self) -> str | None:
        return self.attribute("default")

    @property
    def not_null(self) -> bool:
        return self.attribute("nullable") == "false"

    @property
    def type_name(self) -> str:
        return getattr(self.underlying_type, "__name__", repr(self.underlying_type))


def column(
    annotation: str = "",
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """``dataclasses.field`` carrying a sqlspine annotation.

    Without an explicit default the field defaults to ``None``; the
    engine resets every field to its type's zero value before reading a
    row back, so the dataclass default only matters for construction.
    """
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        default = None
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(
            default_factory=default_factory, metadata={ANNOTATION_KEY: annotation}
        )
    return dataclasses.field(default=default, metadata={ANNOTATION_KEY: annotation})


def parse_annotation(annotation: str) -> tuple[tuple[Attribute, ...], bool]:
    """Split an annotation into attribute pairs and a not-persisted flag.

    Clauses that are neither a two-part pair nor the ``-`` sentinel are
    ignored.  The sentinel stops processing of the remaining clauses.
    """
    pairs: list[Attribute] = []
    for clause in annotation.split(";"):
        parts = clause.split(":")
        if len(parts) == 2:
            pairs.append(Attribute(parts[0].strip(), parts[1].strip()))
        elif len(parts) == 1 and parts[0].strip() == NOT_PERSISTED:
            return tuple(pairs), True
    return tuple(pairs), False


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip an ``Optional[...]``/``X | None`` wrapper from a type."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return tp, False


def entity_class(entity: Any) -> type:
    """Dataclass type of an entity class or instance."""
    cls = entity if isinstance(entity, type) else type(entity)
    if not dataclasses.is_dataclass(cls):
        raise NotARecordTypeError(entity)
    return cls


def frozen_part(cls: type) -> type | None:
    """First frozen dataclass among ``cls`` and its embedded entities."""
    if cls.__dataclass_params__.frozen:
        return cls
    hints = _type_hints(cls)
    for f in dataclasses.fields(cls):
        underlying, _ = unwrap_optional(hints.get(f.name, f.type))
        if dataclasses.is_dataclass(underlying) and isinstance(underlying, type):
            found = frozen_part(underlying)
            if found is not None:
                return found
    return None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except NameError:
        pass
    # Some annotation names a type local to a function; resolve field by field.
    hints: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        hints[f.name] = _resolve_annotation(cls, f)
    return hints


def _resolve_annotation(cls: type, f: dataclasses.Field) -> Any:
    if not isinstance(f.type, str):
        return f.type
    owner = next((b for b in cls.__mro__ if f.name in inspect.get_annotations(b)), cls)
    module = sys.modules.get(owner.__module__)
    globalns = vars(module) if module is not None else {}
    try:
        return eval(f.type, globalns, dict(vars(owner)))  # noqa: S307
    except NameError:
        pass
    # An embedded local dataclass is still reachable through its default factory.
    factory = f.default_factory
    if isinstance(factory, type) and factory.__name__ == f.type.rsplit(".", 1)[-1]:
        return factory
    return f.type


def extract_fields(entity: Any) -> list[FieldDescription]:
    """Return the FieldDescription list for an entity class or instance."""
    return _extract(entity_class(entity), ())


def _extract(cls: type, prefix: tuple[str, ...]) -> list[FieldDescription]:
    hints = _type_hints(cls)
    result: list[FieldDescription] = []
    for f in dataclasses.fields(cls):
        declared = hints.get(f.name, f.type)
        underlying, optional = unwrap_optional(declared)
        attributes, no_db = parse_annotation(f.metadata.get(ANNOTATION_KEY, ""))
        path = prefix + (f.name,)

        if isinstance(declared, str) and not no_db:
            raise ConfigError(
                f"cannot resolve annotation {declared!r} of {cls.__name__}.{f.name}"
            ).with_context(column=camel_to_snake(f.name), annotation=declared)

        if not no_db and dataclasses.is_dataclass(underlying) and isinstance(underlying, type):
            result.extend(_extract(underlying, path))
            continue

        result.append(
            FieldDescription(
                name=f.name,
                storage_name=camel_to_snake(f.name),
                declared_type=declared,
                underlying_type=underlying,
                kind=_KINDS.get(underlying),
                optional=optional,
                no_db=no_db,
                attributes=attributes,
                path=path,
            )
        )
    return result


def persisted_fields(fields: list[FieldDescription]) -> list[FieldDescription]:
    return [fd for fd in fields if not fd.no_db]


# -- Entity value access -----------------------------------------------------


def get_value(entity: Any, fd: FieldDescription) -> Any:
    obj = entity
    for name in fd.path:
        if obj is None:
            return None
        obj = getattr(obj, name)
    return obj


def set_value(entity: Any, fd: FieldDescription, value: Any) -> None:
    obj = entity
    for name in fd.path[:-1]:
        obj = getattr(obj, name)
    object.__setattr__(obj, fd.path[-1], value)


def zero_for_kind(kind: str) -> Any:
    return _ZERO_BY_KIND[kind]


def is_zero(fd: FieldDescription, value: Any) -> bool:
    """Whether ``value`` is the zero value of the field's declared type.

    For optional fields only ``None`` counts as zero.
    """
    if value is None:
        return True
    if fd.optional or fd.kind is None:
        return False
    if fd.kind == "datetime":
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value == ZERO_TIME
    return value == _ZERO_BY_KIND[fd.kind]


def zero_value(tp: Any) -> Any:
    """Zero value of a declared field type."""
    underlying, optional = unwrap_optional(tp)
    if optional:
        return None
    kind = _KINDS.get(underlying)
    if kind is not None:
        return _ZERO_BY_KIND[kind]
    if dataclasses.is_dataclass(underlying) and isinstance(underlying, type):
        instance = object.__new__(underlying)
        _reset(instance, underlying)
        return instance
    try:
        return underlying()
    except TypeError:
        return None


def reset_entity(entity: Any) -> None:
    """Reset every field of ``entity`` (persisted or not) to its zero value."""
    _reset(entity, entity_class(entity))


def _reset(instance: Any, cls: type) -> None:
    hints = _type_hints(cls)
    for f in dataclasses.fields(cls):
        declared = hints.get(f.name, f.type)
        underlying, _ = unwrap_optional(declared)
        if dataclasses.is_dataclass(underlying) and isinstance(underlying, type):
            # embedded entities stay instantiated so their columns can be written back
            current = getattr(instance, f.name, None)
            if current is None:
                current = object.__new__(underlying)
                object.__setattr__(instance, f.name, current)
            _reset(current, underlying)
            continue
        object.__setattr__(instance, f.name, zero_value(declared))


__all__ = [
    "ANNOTATION_KEY",
    "NOT_PERSISTED",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "ZERO_TIME",
    "INT_KINDS",
    "FLOAT_KINDS",
    "Attribute",
    "FieldDescription",
    "column",
    "parse_annotation",
    "unwrap_optional",
    "entity_class",
    "extract_fields",
    "persisted_fields",
    "get_value",
    "set_value",
    "zero_for_kind",
    "is_zero",
    "zero_value",
    "reset_entity",
    "frozen_part",
]
