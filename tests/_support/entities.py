"""Entity types shared by the test suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlspine.core.meta import Float32, Int64, UInt16, column


@dataclass
class Depot:
    depot_num: int = column("primary_key:inc;start:90000000")
    create_date: datetime = column("nullable:false;default:now()")
    region: str = column("nullable:false;default:YYC")
    province: str = column("nullable:false;default:AB")
    country: str = column("nullable:false;default:CA")
    capacity: int = column("nullable:false;default:42")
    note: Optional[str] = column()
    scratch: str = column("-")


@dataclass
class SimpleDepot:
    """Two-column depot whose DDL is easy to compare across dialects."""

    __tablename__ = "depot"

    depot_num: int = column("primary_key:inc;start:90000000")
    region: str = column("nullable:false;default:YYC")


@dataclass
class SimpleDepotV2:
    """``depot`` with one more column and its index."""

    __tablename__ = "depot"

    depot_num: int = column("primary_key:inc;start:90000000")
    region: str = column("nullable:false;default:YYC")
    new_column: str = column("nullable:false;default:xyz;index:non-unique")


@dataclass
class Keyed:
    code: str = column("primary_key:")
    label: str = column()


@dataclass
class KeyedWithSecondKey:
    __tablename__ = "keyed"

    code: str = column("primary_key:")
    label: str = column()
    region: str = column("primary_key:")


@dataclass
class Warehouse:
    id: int = column("primary_key:inc")
    city: str = column("nullable:false")


@dataclass
class Product:
    id: int = column("primary_key:inc")
    name: str = column("nullable:false")
    warehouse_id: int = column("fkey:warehouse(id);index:non-unique")


@dataclass
class GetCmdTest:
    id: int = column("primary_key:inc")
    fld_one_int: int = column("nullable:false")
    fld_two_str: str = column("nullable:false")


@dataclass
class Address:
    city: str = column("nullable:false;default:Calgary")
    postal_code: str = column()


@dataclass
class Customer:
    id: int = column("primary_key:inc")
    name: str = column("nullable:false")
    address: Address = field(default_factory=Address)
    loyalty: Optional[int] = column()


@dataclass
class Measurement:
    id: Int64 = column("primary_key:inc")
    sensor: UInt16 = column("nullable:false")
    reading: Float32 = column()
    active: bool = column("default:true")
    taken_at: datetime = column()
    first_name: str = column("index:idx_measurement_combo")
    last_name: str = column("index:idx_measurement_combo")
    serial: str = column("constraint:unique")


@dataclass
class Unmappable:
    id: int = column("primary_key:inc")
    payload: bytes = column()


@dataclass
class Keyless:
    name: str = column()


@dataclass(frozen=True)
class Route:
    route_id: int = column("primary_key:inc")
    origin: str = column("default:YYC")
