"""Tests for record to column mapping."""

import datetime
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from pydbx import InvalidModelError, db_field, default_field_map, get_column_mapping, get_table_name, is_scannable
from pydbx._utils import concat
from pydbx.mapping import RecordValue, is_auto_increment, parse_tag, populate


@dataclass
class A:
    a1: str = ""
    a2: int = 0


@dataclass
class B:
    b1: str = ""


@dataclass
class Composite:
    x1: str = ""
    a: A = db_field(embedded=True, default_factory=A)
    x2: int = 0
    b: B = field(default_factory=B)
    c: B = db_field("cc", default_factory=B)


@dataclass
class Inner:
    x: int = 0


@dataclass
class Outer:
    inner: Inner = db_field(embedded=True, default_factory=Inner)
    b: Inner = field(default_factory=Inner)


@dataclass
class Tagged:
    code: str = db_field("pk,custom", default="")
    secret: str = db_field("-", default="")
    label: str = db_field("title", default="")
    _cache: dict = field(default_factory=dict)


@dataclass
class EmbeddedScalar:
    id: int = 0
    note: str = db_field(embedded=True, default="")
    label: str = ""


@dataclass
class PkOnly:
    key: int = db_field("pk", default=0)
    id: int = 0


@dataclass
class UpperID:
    ID: int = 0
    id: int = 0


@dataclass
class LowerID:
    id: int = 0
    name: str = ""


@dataclass
class Base:
    id: int = 0
    status: int = 0


@dataclass
class Shadowed:
    base: Base = db_field(embedded=True, default_factory=Base)
    status: str = ""


@dataclass
class P:
    name: str = "p"


@dataclass
class Q:
    name: str = "q"


@dataclass
class Tie:
    p: P = db_field(embedded=True, default_factory=P)
    q: Q = db_field(embedded=True, default_factory=Q)


@dataclass
class Money:
    cents: int = 0

    @classmethod
    def scan(cls, value):
        return cls(int(value))


@dataclass
class Address:
    city: str = ""


@dataclass
class Order:
    id: int = 0
    price: Money = field(default_factory=Money)
    created: datetime.datetime | None = None
    address: Address | None = None


@dataclass
class Node:
    value: int = 0
    parent: "Node | None" = None


@dataclass
class MyCustomer:
    id: int = 0


@dataclass
class Named:
    id: int = 0

    def table_name(self):
        return "customers"


class TestDefaultFieldMap:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Name", "name"),
            ("FirstName", "first_name"),
            ("Name0", "name0"),
            ("ID", "id"),
            ("UserID", "user_id"),
            ("User0ID", "user0_id"),
            ("MyURL", "my_url"),
            ("URLPath", "urlpath"),
            ("MyURLPath", "my_urlpath"),
            ("First_Name", "first_name"),
            ("_FirstName", "_first_name"),
            ("first_name", "first_name"),
        ],
    )
    def test_mapping(self, name, expected):
        assert default_field_map(name) == expected


class TestHelpers:
    def test_concat(self):
        assert concat("a", "", "b") == "a.b"
        assert concat("", "x") == "x"
        assert concat("", "") == ""

    @pytest.mark.parametrize(
        "tag,expected",
        [
            pytest.param("pk", ("", True), id="pk"),
            pytest.param("pk,name", ("name", True), id="pk_named"),
            pytest.param("name", ("name", False), id="named"),
            pytest.param("", ("", False), id="empty"),
        ],
    )
    def test_parse_tag(self, tag, expected):
        assert parse_tag(tag) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            pytest.param(None, True, id="none"),
            pytest.param(0, True, id="zero"),
            pytest.param(0.0, True, id="zero_float"),
            pytest.param(Decimal(0), True, id="zero_decimal"),
            pytest.param(5, False, id="set"),
            pytest.param(False, False, id="bool"),
            pytest.param("", False, id="string"),
        ],
    )
    def test_is_auto_increment(self, value, expected):
        assert is_auto_increment(value) is expected

    def test_is_scannable(self):
        assert is_scannable(Money)
        assert is_scannable(datetime.datetime)
        assert is_scannable(datetime.date)
        assert not is_scannable(A)
        assert not is_scannable(int)
        assert not is_scannable(list[int])


class TestColumnMapping:
    def test_nested_paths(self):
        mapping = get_column_mapping(Composite)
        assert {name: fi.path for name, fi in mapping.name_map.items()} == {
            "x1": ("x1",),
            "a1": ("a", "a1"),
            "a2": ("a", "a2"),
            "x2": ("x2",),
            "b.b1": ("b", "b1"),
            "c.b1": ("c", "b1"),
        }
        assert set(mapping.db_name_map) == {"x1", "a1", "a2", "x2", "b.b1", "cc.b1"}

    def test_embedded_and_named_prefix(self):
        mapping = get_column_mapping(Outer)
        assert set(mapping.db_name_map) == {"x", "b.x"}
        assert set(mapping.name_map) == {"x", "b.x"}

    def test_tags(self):
        mapping = get_column_mapping(Tagged)
        assert set(mapping.name_map) == {"code", "label"}
        assert mapping.name_map["code"].db_name == "custom"
        assert mapping.name_map["code"].is_pk
        assert mapping.name_map["label"].db_name == "title"
        assert "secret" not in mapping.db_name_map
        assert mapping.pk_names == ("code",)

    def test_embedded_scalar_without_name_skipped(self):
        mapping = get_column_mapping(EmbeddedScalar)
        assert set(mapping.db_name_map) == {"id", "label"}
        assert "" not in mapping.name_map
        assert RecordValue(EmbeddedScalar(1, "n", "t")).columns() == {"id": 1, "label": "t"}

    def test_explicit_pk_beats_id(self):
        mapping = get_column_mapping(PkOnly)
        assert mapping.pk_names == ("key",)
        assert mapping.name_map["key"].db_name == "key"

    def test_implicit_pk(self):
        assert get_column_mapping(UpperID).pk_names == ("ID",)
        assert get_column_mapping(LowerID).pk_names == ("id",)
        assert get_column_mapping(A).pk_names == ()

    def test_shorter_path_shadows(self):
        mapping = get_column_mapping(Shadowed)
        assert mapping.name_map["status"].path == ("status",)
        assert mapping.pk_names == ("id",)
        record = Shadowed(Base(1, 10), "20")
        assert RecordValue(record).columns() == {"id": 1, "status": "20"}

    def test_tie_first_declared_wins(self):
        mapping = get_column_mapping(Tie)
        assert mapping.name_map["name"].path == ("p", "name")
        assert RecordValue(Tie()).columns() == {"name": "p"}

    def test_terminal_types(self):
        mapping = get_column_mapping(Order)
        assert set(mapping.name_map) == {"id", "price", "created", "address.city"}
        assert mapping.name_map["created"].field_type is datetime.datetime

    def test_custom_mapper(self):
        mapping = get_column_mapping(LowerID, str.upper)
        assert set(mapping.db_name_map) == {"ID", "NAME"}
        assert mapping is not get_column_mapping(LowerID)

    def test_cached(self):
        assert get_column_mapping(Composite) is get_column_mapping(Composite)

    def test_concurrent_first_build(self):
        @dataclass
        class Fresh:
            id: int = 0

        barrier = threading.Barrier(8)

        def build():
            barrier.wait()
            return get_column_mapping(Fresh)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: build(), range(8)))
        assert all(r is results[0] for r in results)

    def test_not_a_dataclass(self):
        with pytest.raises(InvalidModelError, match="dataclass"):
            get_column_mapping(int)

    def test_recursive_type(self):
        with pytest.raises(InvalidModelError, match="recursive"):
            get_column_mapping(Node)


class TestRecordValue:
    def test_columns_include_exclude(self):
        record = Composite(x1="a", a=A("p", 2), x2=3, b=B("q"), c=B("r"))
        value = RecordValue(record)
        assert value.columns() == {"x1": "a", "a1": "p", "a2": 2, "x2": 3, "b.b1": "q", "cc.b1": "r"}
        assert value.columns(["x1", "b.b1"]) == {"x1": "a", "b.b1": "q"}
        assert "a1" not in value.columns(exclude=["a1"])
        assert value.columns(["nope"]) == {}

    def test_pk(self):
        assert RecordValue(Tagged(code="X")).pk() == {"custom": "X"}
        assert RecordValue(A()).pk() == {}

    def test_none_nested_value(self):
        assert RecordValue(Order(id=1)).columns(["address.city"]) == {"address.city": None}

    @pytest.mark.parametrize("value", [42, "x", A])
    def test_rejects_non_records(self, value):
        with pytest.raises(InvalidModelError):
            RecordValue(value)


class TestPopulate:
    def test_nested_and_unknown_columns(self):
        record = populate(Composite, {"x1": "a", "b.b1": "q", "cc.b1": "r", "unknown": 1})
        assert record.x1 == "a"
        assert record.b.b1 == "q"
        assert record.c.b1 == "r"
        assert record.x2 == 0

    def test_creates_missing_nested_record(self):
        record = populate(Order, {"id": 1, "address.city": "Paris"})
        assert record.address == Address("Paris")
        assert record.created is None

    def test_scanner(self):
        record = populate(Order, {"id": 1, "price": "125"})
        assert record.price == Money(125)


class TestTableName:
    def test_default(self):
        assert get_table_name(MyCustomer) == "my_customer"
        assert get_table_name(MyCustomer()) == "my_customer"

    def test_declared(self):
        assert get_table_name(Named) == "customers"
        assert get_table_name(Named(id=1)) == "customers"
