"""Tests for ``sqlspine.core.meta`` - metadata extraction and zero values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from sqlspine.core.errors import ConfigError, NotARecordTypeError
from sqlspine.core.meta import (
    ZERO_TIME,
    Attribute,
    column,
    extract_fields,
    frozen_part,
    get_value,
    is_zero,
    parse_annotation,
    persisted_fields,
    reset_entity,
    set_value,
    zero_value,
)

from tests._support.entities import Address, Customer, Depot, Measurement


def _by_name(entity):
    return {fd.name: fd for fd in extract_fields(entity)}


class TestParseAnnotation:
    def test_pairs_in_order(self):
        pairs, no_db = parse_annotation("primary_key:inc;start:90000000")
        assert pairs == (Attribute("primary_key", "inc"), Attribute("start", "90000000"))
        assert no_db is False

    def test_not_persisted_sentinel(self):
        assert parse_annotation("-") == ((), True)

    def test_sentinel_stops_processing(self):
        pairs, no_db = parse_annotation("nullable:false;-;default:x")
        assert pairs == (Attribute("nullable", "false"),)
        assert no_db is True

    def test_empty_annotation(self):
        assert parse_annotation("") == ((), False)

    def test_malformed_clauses_ignored(self):
        pairs, _ = parse_annotation("a:b:c;nullable:true;junk")
        assert pairs == (Attribute("nullable", "true"),)

    def test_whitespace_trimmed(self):
        pairs, _ = parse_annotation(" default : YYC ")
        assert pairs == (Attribute("default", "YYC"),)


class TestExtractFields:
    def test_order_and_storage_names(self):
        names = [fd.storage_name for fd in extract_fields(Depot)]
        assert names == [
            "depot_num",
            "create_date",
            "region",
            "province",
            "country",
            "capacity",
            "note",
            "scratch",
        ]

    def test_instance_accepted(self):
        assert [fd.name for fd in extract_fields(Depot())] == [
            fd.name for fd in extract_fields(Depot)
        ]

    def test_optional_unwrapped(self):
        note = _by_name(Depot)["note"]
        assert note.optional is True
        assert note.underlying_type is str
        assert note.kind == "str"

    def test_not_persisted_flag(self):
        fields = _by_name(Depot)
        assert fields["scratch"].no_db is True
        assert "scratch" not in [fd.name for fd in persisted_fields(list(fields.values()))]

    def test_width_markers(self):
        fields = _by_name(Measurement)
        assert fields["id"].kind == "int64"
        assert fields["sensor"].kind == "uint16"
        assert fields["reading"].kind == "float32"
        assert fields["active"].kind == "bool"
        assert fields["taken_at"].kind == "datetime"

    def test_embedded_entity_flattened_in_place(self):
        fields = extract_fields(Customer)
        assert [fd.storage_name for fd in fields] == [
            "id",
            "name",
            "city",
            "postal_code",
            "loyalty",
        ]
        city = fields[2]
        assert city.path == ("address", "city")
        assert city.default == "Calgary"

    def test_key_helpers(self):
        fields = _by_name(Depot)
        assert fields["depot_num"].is_primary_key
        assert fields["depot_num"].is_increment
        assert fields["region"].not_null
        assert fields["region"].default == "YYC"
        assert not fields["note"].not_null

    @pytest.mark.parametrize("value", [42, "depot", None, object()])
    def test_not_a_record_type(self, value):
        with pytest.raises(NotARecordTypeError):
            extract_fields(value)


class TestValueAccess:
    def test_get_and_set_through_path(self):
        customer = Customer(name="Ann", address=Address(city="Banff"))
        city = _by_name(Customer)["city"]
        assert get_value(customer, city) == "Banff"
        set_value(customer, city, "Canmore")
        assert customer.address.city == "Canmore"


class TestZeroValues:
    def test_is_zero_by_kind(self):
        fields = _by_name(Depot)
        assert is_zero(fields["region"], "")
        assert not is_zero(fields["region"], "YVR")
        assert is_zero(fields["capacity"], 0)
        assert is_zero(fields["capacity"], None)
        assert is_zero(fields["create_date"], ZERO_TIME)
        assert is_zero(fields["create_date"], datetime(1, 1, 1))
        assert not is_zero(fields["create_date"], datetime(2024, 1, 1, tzinfo=timezone.utc))

    def test_optional_zero_only_when_none(self):
        note = _by_name(Depot)["note"]
        assert is_zero(note, None)
        assert not is_zero(note, "")

    def test_zero_value_of_types(self):
        assert zero_value(int) == 0
        assert zero_value(str) == ""
        assert zero_value(bool) is False
        assert zero_value(datetime) == ZERO_TIME

    def test_reset_entity_zeroes_everything(self):
        depot = Depot(depot_num=5, region="YVR", note="n", scratch="tmp", capacity=3)
        reset_entity(depot)
        assert depot == Depot(
            depot_num=0,
            create_date=ZERO_TIME,
            region="",
            province="",
            country="",
            capacity=0,
            note=None,
            scratch="",
        )

    def test_reset_entity_recurses_into_embedded(self):
        customer = Customer(id=1, name="Ann", address=Address(city="Banff", postal_code="T1L"))
        reset_entity(customer)
        assert customer.address == Address(city="", postal_code="")
        assert customer.loyalty is None

    def test_reset_instantiates_missing_embedded(self):
        customer = Customer(address=None)
        reset_entity(customer)
        assert customer.address == Address(city="", postal_code="")

    def test_zero_value_of_dataclass(self):
        @dataclass
        class Pair:
            left: int = 1
            right: str = "x"

        assert zero_value(Pair) == Pair(0, "")


class TestLocalTypes:
    """Entities declared inside a function, resolved under postponed annotations."""

    def test_local_embedded_entity_resolved(self):
        @dataclass
        class Loc:
            city: str = column("default:YYC")

        @dataclass
        class Shop:
            id: int = column("primary_key:inc")
            loc: Loc = column(default_factory=Loc)

        fields = _by_name(Shop)
        assert fields["id"].kind == "int"
        assert fields["city"].kind == "str"
        assert fields["city"].path == ("loc", "city")

    def test_local_embedded_entity_round_trip(self, sqlite_engine):
        @dataclass
        class Loc:
            city: str = column("default:YYC")

        @dataclass
        class Shop:
            id: int = column("primary_key:inc")
            loc: Loc = column(default_factory=Loc)

        sqlite_engine.create_tables(Shop)
        shop = sqlite_engine.create(Shop())
        assert shop.loc.city == "YYC"
        fetched = sqlite_engine.get_entity(Shop(id=shop.id))
        assert fetched.loc == Loc(city="YYC")

    def test_unresolvable_annotation_named(self):
        @dataclass
        class Loc:
            city: str = ""

        @dataclass
        class Shop:
            id: int = column("primary_key:inc")
            loc: Loc | None = None

        with pytest.raises(ConfigError, match=r"'Loc \| None' of Shop\.loc") as exc:
            extract_fields(Shop)
        assert exc.value.context.column == "loc"

    def test_unresolvable_annotation_ignored_when_not_persisted(self):
        @dataclass
        class Loc:
            city: str = ""

        @dataclass
        class Shop:
            id: int = column("primary_key:inc")
            cache: Loc | None = column("-")

        fields = _by_name(Shop)
        assert fields["id"].kind == "int"
        assert fields["cache"].no_db


class TestFrozenPart:
    def test_plain_entity(self):
        assert frozen_part(Customer) is None

    def test_frozen_entity(self):
        @dataclass(frozen=True)
        class Point:
            x: int = 0

        assert frozen_part(Point) is Point

    def test_frozen_embedded_entity(self):
        @dataclass(frozen=True)
        class Coords:
            lat: float = 0.0

        @dataclass
        class Site:
            id: int = column("primary_key:inc")
            coords: Coords = column(default_factory=Coords)

        assert frozen_part(Site) is Coords
