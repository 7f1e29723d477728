"""Tests for mapping records whose annotations are postponed strings."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

import pytest

from pydbx import InvalidModelError, db_field, get_column_mapping
from pydbx.mapping import populate


@dataclass
class Location:
    city: str = ""


@dataclass
class Shop:
    id: int = 0
    location: Location | None = None
    opened: datetime.date | None = None


class TestPostponedAnnotations:
    def test_module_level_nested_record(self):
        mapping = get_column_mapping(Shop)
        assert sorted(mapping.db_name_map) == ["id", "location.city", "opened"]
        assert mapping.name_map["location.city"].types == (Shop, Location)
        assert mapping.name_map["opened"].field_type is datetime.date

    def test_local_nested_record_resolved_from_default(self):
        @dataclass
        class Addr:
            city: str = ""

        @dataclass
        class Cust:
            id: int = 0
            addr: Addr = field(default_factory=Addr)

        mapping = get_column_mapping(Cust)
        assert sorted(mapping.db_name_map) == ["addr.city", "id"]
        assert mapping.name_map["addr.city"].path == ("addr", "city")
        assert populate(Cust, {"id": 1, "addr.city": "Oslo"}) == Cust(1, Addr("Oslo"))

    def test_local_embedded_record(self):
        @dataclass
        class Audit:
            created_by: str = ""

        @dataclass
        class Doc:
            id: int = 0
            audit: Audit = db_field(embedded=True, default_factory=Audit)

        assert sorted(get_column_mapping(Doc).db_name_map) == ["created_by", "id"]

    def test_unresolvable_annotation(self):
        @dataclass
        class Addr:
            city: str = ""

        @dataclass
        class Cust:
            id: int = 0
            addr: Addr | None = None

        with pytest.raises(InvalidModelError, match="Addr") as exc_info:
            get_column_mapping(Cust)
        assert isinstance(exc_info.value.wrapped, NameError)
