"""Immutable SELECT statement builder."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydbx._errors import CompositePrimaryKeyError, MissingPrimaryKeyError
from pydbx.dialect._base import JoinInfo, UnionInfo
from pydbx.expression import Expression, HashExp, and_, or_
from pydbx.mapping import get_column_mapping
from pydbx.params import Params

if TYPE_CHECKING:
    from pydbx.db import DB
    from pydbx.query import Query


@dataclass(frozen=True)
class SelectQuery:
    """Clause state of a SELECT statement.

    Every builder method returns a new ``SelectQuery``; :meth:`build`
    renders the accumulated clauses into a :class:`~pydbx.query.Query`.
    """

    db: DB
    columns: tuple[str, ...] = ()
    is_distinct: bool = False
    option: str = ""
    tables: tuple[str, ...] = ()
    where_exp: Expression | None = None
    joins: tuple[JoinInfo, ...] = ()
    order_cols: tuple[str, ...] = ()
    group_cols: tuple[str, ...] = ()
    having_exp: Expression | None = None
    unions: tuple[UnionInfo, ...] = ()
    limit_value: int | None = None
    offset_value: int | None = None
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    context: Any = None

    def _with(self, **changes: Any) -> SelectQuery:
        return dataclasses.replace(self, **changes)

    def select(self, *cols: str) -> SelectQuery:
        """Replace the selected columns. No columns selects ``*``."""
        return self._with(columns=cols)

    def and_select(self, *cols: str) -> SelectQuery:
        return self._with(columns=self.columns + cols)

    def distinct(self, value: bool = True) -> SelectQuery:
        return self._with(is_distinct=value)

    def select_option(self, option: str) -> SelectQuery:
        """Set a keyword placed after SELECT, e.g. ``SQL_CALC_FOUND_ROWS``."""
        return self._with(option=option)

    def from_(self, *tables: str) -> SelectQuery:
        return self._with(tables=tables)

    def where(self, exp: Expression | None) -> SelectQuery:
        return self._with(where_exp=exp)

    def and_where(self, exp: Expression) -> SelectQuery:
        if self.where_exp is None:
            return self._with(where_exp=exp)
        return self._with(where_exp=and_(self.where_exp, exp))

    def or_where(self, exp: Expression) -> SelectQuery:
        if self.where_exp is None:
            return self._with(where_exp=exp)
        return self._with(where_exp=or_(self.where_exp, exp))

    def join(self, typ: str, table: str, on: Expression | None = None) -> SelectQuery:
        return self._with(joins=self.joins + (JoinInfo(typ, table, on),))

    def inner_join(self, table: str, on: Expression | None = None) -> SelectQuery:
        return self.join("INNER JOIN", table, on)

    def left_join(self, table: str, on: Expression | None = None) -> SelectQuery:
        return self.join("LEFT JOIN", table, on)

    def right_join(self, table: str, on: Expression | None = None) -> SelectQuery:
        return self.join("RIGHT JOIN", table, on)

    def order_by(self, *cols: str) -> SelectQuery:
        """Replace the ordering. Columns may end with ``ASC`` or ``DESC``."""
        return self._with(order_cols=cols)

    def and_order_by(self, *cols: str) -> SelectQuery:
        return self._with(order_cols=self.order_cols + cols)

    def group_by(self, *cols: str) -> SelectQuery:
        return self._with(group_cols=cols)

    def and_group_by(self, *cols: str) -> SelectQuery:
        return self._with(group_cols=self.group_cols + cols)

    def having(self, exp: Expression | None) -> SelectQuery:
        return self._with(having_exp=exp)

    def and_having(self, exp: Expression) -> SelectQuery:
        if self.having_exp is None:
            return self._with(having_exp=exp)
        return self._with(having_exp=and_(self.having_exp, exp))

    def or_having(self, exp: Expression) -> SelectQuery:
        if self.having_exp is None:
            return self._with(having_exp=exp)
        return self._with(having_exp=or_(self.having_exp, exp))

    def union(self, query: Query) -> SelectQuery:
        return self._with(unions=self.unions + (UnionInfo(query, False),))

    def union_all(self, query: Query) -> SelectQuery:
        return self._with(unions=self.unions + (UnionInfo(query, True),))

    def limit(self, limit: int | None) -> SelectQuery:
        """Set the row limit. ``None`` or a negative value removes it."""
        return self._with(limit_value=limit)

    def offset(self, offset: int | None) -> SelectQuery:
        """Set the row offset. ``None`` or a negative value removes it."""
        return self._with(offset_value=offset)

    def bind(self, params: Mapping[str, Any]) -> SelectQuery:
        return self._with(params=MappingProxyType(dict(params)))

    def and_bind(self, params: Mapping[str, Any]) -> SelectQuery:
        merged = dict(self.params)
        merged.update(params)
        return self._with(params=MappingProxyType(merged))

    def with_context(self, context: Any) -> SelectQuery:
        return self._with(context=context)

    def build(self) -> Query:
        """Render the statement into an executable query."""
        dialect = self.db.dialect
        params = Params(self.params)

        clauses = [
            dialect.build_select(self.columns, self.is_distinct, self.option),
            dialect.build_from(self.tables),
            dialect.build_join(self.joins, params),
            dialect.build_where(self.where_exp, params),
            dialect.build_group_by(self.group_cols),
            dialect.build_having(self.having_exp, params),
        ]
        sql = " ".join(c for c in clauses if c)
        sql = dialect.build_order_by_and_limit(
            sql, self.order_cols, self.limit_value, self.offset_value
        )

        union = dialect.build_union(self.unions, params)
        if union:
            sql = f"({sql}) {union}"

        return self.db.new_query(sql, params).with_context(self.context)

    def _for_record(self, record_type: type | None) -> SelectQuery:
        if record_type is None or self.tables:
            return self
        return self.from_(self.db.table_mapper(record_type))

    def one(self, record_type: type | None = None) -> Any:
        """Fetch the first row, reading from the record's table if no FROM was set."""
        return self._for_record(record_type).build().one(record_type)

    def all(self, record_type: type | None = None) -> list[Any]:
        return self._for_record(record_type).build().all(record_type)

    def rows(self) -> list[dict[str, Any]]:
        return self.build().rows()

    def row(self) -> tuple[Any, ...] | None:
        return self.build().row()

    def column(self) -> list[Any]:
        return self.build().column()

    def model(self, pk: Any, record_type: type) -> Any:
        """Fetch the record whose single primary key equals ``pk``.

        Raises:
            MissingPrimaryKeyError: If the record type has no primary key.
            CompositePrimaryKeyError: If the primary key spans several fields.
        """
        mapping = get_column_mapping(record_type, self.db.field_mapper)
        if not mapping.pk_names:
            raise MissingPrimaryKeyError(f"{record_type.__name__} has no primary key")
        if len(mapping.pk_names) > 1:
            raise CompositePrimaryKeyError(
                f"{record_type.__name__} has a composite primary key",
                f"primary key fields: {', '.join(mapping.pk_names)}",
            )
        pk_field = mapping.name_map[mapping.pk_names[0]]
        return self.and_where(HashExp({pk_field.db_name: pk})).one(record_type)
