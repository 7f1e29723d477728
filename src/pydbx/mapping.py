"""Record to column mapping.

Records are dataclasses. Each field maps to a column named by the
field's ``db`` metadata, falling back to a naming policy applied to the
attribute name. Nested dataclass fields are flattened into dotted
column names; fields declared with ``db_field(embedded=True)`` are
flattened without adding their own name.

Example::

    @dataclass
    class Address:
        city: str = ""

    @dataclass
    class Customer:
        id: int = db_field("pk")
        first_name: str = ""
        address: Address = db_field(default_factory=Address)

``Customer`` maps to the columns ``id``, ``first_name`` and
``address.city`` with ``id`` as its primary key.
"""

from __future__ import annotations

import dataclasses
import datetime
import numbers
import threading
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from pydbx._constants import DB_TAG, EMBEDDED_TAG, IMPLICIT_PK_NAMES, PK_TAG, SKIP_TAG
from pydbx._errors import InvalidModelError
from pydbx._utils import concat, default_field_map

FieldMapFunc = Callable[[str], str]
"""Naming policy turning an attribute name into a column name."""

TableMapFunc = Callable[[Any], str]
"""Resolves the table name of a record or record type."""

_TERMINAL_TYPES = (datetime.date, datetime.time, datetime.timedelta)


@runtime_checkable
class Scanner(Protocol):
    """A type read from a single column value.

    ``scan`` receives the raw column value and returns the field value,
    so it is normally a classmethod or staticmethod.
    """

    def scan(self, value: Any) -> Any: ...


@runtime_checkable
class TableModel(Protocol):
    """A record declaring its own table name."""

    def table_name(self) -> str: ...


def db_field(tag: str = "", *, embedded: bool = False, **kwargs: Any) -> Any:
    """Declare a dataclass field with a column annotation.

    Args:
        tag: ``"-"`` to skip the field, ``"pk"`` or ``"pk,name"`` to
            mark a primary key, or a column name.
        embedded: Flatten a nested record without a name segment.
        **kwargs: Passed through to :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[DB_TAG] = tag
    if embedded:
        metadata[EMBEDDED_TAG] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def parse_tag(tag: str) -> tuple[str, bool]:
    """Split a column annotation into (column name, is primary key)."""
    if tag == PK_TAG:
        return "", True
    if tag.startswith(PK_TAG + ","):
        return tag[len(PK_TAG) + 1 :], True
    return tag, False


def is_scannable(tp: Any) -> bool:
    """Report whether a type is read from one column as an opaque value."""
    if not isinstance(tp, type) or isinstance(tp, types.GenericAlias):
        return False
    return issubclass(tp, _TERMINAL_TYPES) or issubclass(tp, Scanner)


def is_record(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_nested(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp) and not is_scannable(tp)


def _field_types(cls: type) -> dict[str, Any]:
    """Resolve field annotations, including postponed ones.

    Besides the module globals, names resolve against the class itself
    and the types given as field defaults, so records declared inside a
    function still resolve their nested record fields.
    """
    localns: dict[str, Any] = {cls.__name__: cls}
    for f in dataclasses.fields(cls):
        for candidate in (f.default_factory, f.default):
            if isinstance(candidate, type):
                localns.setdefault(candidate.__name__, candidate)
            elif is_record(candidate):
                localns.setdefault(type(candidate).__name__, type(candidate))
    try:
        hints = typing.get_type_hints(cls, localns=localns)
    except (NameError, TypeError) as exc:
        raise InvalidModelError(
            f"cannot resolve field types of {cls.__name__}: {exc}",
            f"type annotations of {cls.__qualname__} must be resolvable from its module",
            wrapped=exc,
        ) from exc
    return {f.name: _unwrap_optional(hints[f.name]) for f in dataclasses.fields(cls)}


def _blank(cls: type) -> Any:
    """Create a record without calling ``__init__``.

    Fields get their declared defaults, or ``None`` where they have none.
    """
    obj = cls.__new__(cls)
    for f in dataclasses.fields(cls):
        if f.default is not dataclasses.MISSING:
            value = f.default
        elif f.default_factory is not dataclasses.MISSING:
            value = f.default_factory()
        else:
            value = None
        object.__setattr__(obj, f.name, value)
    return obj


@dataclass(frozen=True)
class FieldInfo:
    """A mapped field.

    ``name`` is the logical dotted attribute path, ``db_name`` the column
    name and ``path`` the attributes walked from the record to reach it.
    ``types`` holds the record type owning each step of ``path``.
    """

    name: str
    db_name: str
    path: tuple[str, ...]
    types: tuple[type, ...]
    field_type: Any = None
    is_pk: bool = False

    def get_value(self, record: Any) -> Any:
        value = record
        for attr in self.path:
            if value is None:
                return None
            value = getattr(value, attr)
        return value

    def set_value(self, record: Any, value: Any) -> None:
        """Assign the field, creating missing intermediate records."""
        target = record
        for i, attr in enumerate(self.path[:-1]):
            child = getattr(target, attr)
            if child is None:
                child = _blank(self.types[i + 1])
                object.__setattr__(target, attr, child)
            target = child
        if value is not None and is_scannable(self.field_type) and hasattr(self.field_type, "scan"):
            value = self.field_type.scan(value)
        object.__setattr__(target, self.path[-1], value)


@dataclass(frozen=True)
class ColumnMapping:
    """Resolved field table of one record type under one naming policy."""

    name_map: Mapping[str, FieldInfo]
    db_name_map: Mapping[str, FieldInfo]
    pk_names: tuple[str, ...]


class _MappingBuilder:
    def __init__(self, mapper: FieldMapFunc) -> None:
        self.mapper = mapper
        self.name_map: dict[str, FieldInfo] = {}
        self.db_name_map: dict[str, FieldInfo] = {}
        self.pk_names: list[str] = []

    def build(
        self,
        cls: type,
        path: tuple[str, ...],
        owners: tuple[type, ...],
        name_prefix: str,
        db_name_prefix: str,
    ) -> None:
        if cls in owners:
            raise InvalidModelError(
                f"recursive record type: {cls.__name__}",
                f"{cls.__name__} is reachable from itself via {'.'.join(path)}",
            )
        owners = owners + (cls,)
        hints = _field_types(cls)
        for f in dataclasses.fields(cls):
            tag = f.metadata.get(DB_TAG, "")
            embedded = bool(f.metadata.get(EMBEDDED_TAG, False))
            if tag == SKIP_TAG or (f.name.startswith("_") and not embedded):
                continue

            tp = hints[f.name]
            db_name, is_pk = parse_tag(tag)
            name = "" if embedded else f.name
            if not db_name and not embedded:
                db_name = self.mapper(f.name)

            if _is_nested(tp):
                self.build(
                    tp,
                    path + (f.name,),
                    owners,
                    concat(name_prefix, name),
                    concat(db_name_prefix, db_name),
                )
                continue
            if not db_name:
                # Embedded scalars have no column of their own.
                continue

            self.add(FieldInfo(
                name=concat(name_prefix, name),
                db_name=concat(db_name_prefix, db_name),
                path=path + (f.name,),
                types=owners,
                field_type=tp,
                is_pk=is_pk,
            ))

    def add(self, fi: FieldInfo) -> None:
        # A shorter path shadows a longer one; the first declared wins ties.
        current = self.name_map.get(fi.name)
        if current is not None and len(fi.path) >= len(current.path):
            return
        if current is not None:
            self.db_name_map.pop(current.db_name, None)
            if current.name in self.pk_names:
                self.pk_names.remove(current.name)
        self.name_map[fi.name] = fi
        self.db_name_map[fi.db_name] = fi
        if fi.is_pk:
            self.pk_names.append(fi.name)

    def result(self) -> ColumnMapping:
        pk_names = list(self.pk_names)
        if not pk_names:
            for candidate in IMPLICIT_PK_NAMES:
                if candidate in self.name_map:
                    pk_names.append(candidate)
                    break
        return ColumnMapping(
            name_map=MappingProxyType(dict(self.name_map)),
            db_name_map=MappingProxyType(dict(self.db_name_map)),
            pk_names=tuple(pk_names),
        )


_cache: dict[tuple[type, FieldMapFunc], ColumnMapping] = {}
_cache_lock = threading.Lock()


def get_column_mapping(
    record_type: type, mapper: FieldMapFunc = default_field_map
) -> ColumnMapping:
    """Return the cached column mapping for a record type.

    Raises:
        InvalidModelError: If ``record_type`` is not a dataclass.
    """
    key = (record_type, mapper)
    mapping = _cache.get(key)
    if mapping is not None:
        return mapping

    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise InvalidModelError(
            "record must be a dataclass",
            f"cannot map values of type {getattr(record_type, '__name__', record_type)!r}",
        )

    with _cache_lock:
        mapping = _cache.get(key)
        if mapping is None:
            builder = _MappingBuilder(mapper)
            builder.build(record_type, (), (), "", "")
            mapping = builder.result()
            _cache[key] = mapping
    return mapping


def get_table_name(record: Any) -> str:
    """Resolve the table name of a record or record type.

    A ``table_name()`` method wins; otherwise the class name is passed
    through :func:`default_field_map`.
    """
    cls = record if isinstance(record, type) else type(record)
    if callable(getattr(cls, "table_name", None)):
        instance = _blank(cls) if record is cls and dataclasses.is_dataclass(cls) else record
        return instance.table_name()
    return default_field_map(cls.__name__)


def is_auto_increment(value: Any) -> bool:
    """Report whether a primary key value asks the database to generate it."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return isinstance(value, numbers.Number) and value == 0


def populate(
    record_type: type, row: Mapping[str, Any], mapper: FieldMapFunc = default_field_map
) -> Any:
    """Build a record from a column name to value mapping.

    Columns without a mapped field are ignored.
    """
    mapping = get_column_mapping(record_type, mapper)
    record = _blank(record_type)
    for column, value in row.items():
        fi = mapping.db_name_map.get(column)
        if fi is not None:
            fi.set_value(record, value)
    return record


class RecordValue:
    """A record instance paired with its column mapping."""

    def __init__(self, record: Any, mapper: FieldMapFunc = default_field_map) -> None:
        if not is_record(record):
            raise InvalidModelError(
                "model must be a dataclass instance",
                f"got value of type {type(record).__name__}",
            )
        self.record = record
        self.mapping = get_column_mapping(type(record), mapper)

    def columns(
        self, include: Iterable[str] = (), exclude: Iterable[str] = ()
    ) -> dict[str, Any]:
        """Column values keyed by column name.

        ``include`` and ``exclude`` name fields by logical name; an empty
        ``include`` selects every mapped field.
        """
        name_map = self.mapping.name_map
        include = list(include)
        if include:
            fields = [name_map[n] for n in include if n in name_map]
        else:
            fields = list(name_map.values())
        cols = {fi.db_name: fi.get_value(self.record) for fi in fields}
        for name in exclude:
            fi = name_map.get(name)
            if fi is not None:
                cols.pop(fi.db_name, None)
        return cols

    def pk(self) -> dict[str, Any]:
        """Primary key values keyed by column name."""
        return {
            self.mapping.name_map[n].db_name: self.mapping.name_map[n].get_value(self.record)
            for n in self.mapping.pk_names
        }
