"""Base SQL dialect rendering ANSI SQL."""

from __future__ import annotations

import copy
import enum
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydbx._constants import MAX_LIMIT
from pydbx._errors import UnsupportedOperationError
from pydbx.expression import Expression
from pydbx.params import Params

if TYPE_CHECKING:
    from pydbx.query import Query


class DialectName(enum.StrEnum):
    STANDARD = "standard"
    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    MSSQL = "mssql"
    ORACLE = "oracle"


@dataclass(frozen=True)
class Statement:
    """A rendered statement whose values are bound to ``{:pN}`` placeholders."""

    sql: str
    params: Params = field(default_factory=Params)


@dataclass(frozen=True)
class JoinInfo:
    """A single JOIN clause."""

    join: str
    table: str
    on: Expression | None = None


@dataclass(frozen=True)
class UnionInfo:
    """A query appended with UNION or UNION ALL."""

    query: Query
    all: bool = False


_SELECT_ALIAS_RE = re.compile(r"(?:\s+as\s+|\s+)([\w\-.]+)$", re.IGNORECASE)
_ORDER_DIRECTION_RE = re.compile(r"\s+(ASC|DESC)$", re.IGNORECASE)
_GENERATED_PARAM_RE = re.compile(r"\{:(p\d+)\}")

# Positional placeholder per DB-API 2.0 paramstyle. Values are always
# passed as a sequence, so the format styles use bare ``%s``.
PARAMSTYLE_PLACEHOLDERS: Mapping[str, str] = MappingProxyType({
    "qmark": "?",
    "numeric": ":{0}",
    "named": ":p{0}",
    "format": "%s",
    "pyformat": "%s",
})


def _as_int(value: int | None) -> int:
    return -1 if value is None else value


def _merge_union_params(sql: str, source: Mapping[str, Any], params: Params) -> str:
    """Merge a union member's bindings into ``params``.

    Generated ``pN`` names of the member are re-allocated in ``params`` so
    they cannot overwrite the outer statement's own generated values. Other
    names are merged as they are.
    """
    renamed: dict[str, str] = {}

    def rename(m: re.Match[str]) -> str:
        name = m.group(1)
        if name not in source:
            return m.group(0)
        if name not in renamed:
            renamed[name] = params.add(source[name])
        return "{:" + renamed[name] + "}"

    sql = _GENERATED_PARAM_RE.sub(rename, sql)
    for name, value in source.items():
        if name not in renamed:
            params[name] = value
    return sql


class Dialect:
    """Standard SQL dialect.

    Subclasses override only the fragments their database renders
    differently: identifier quoting, placeholder syntax, pagination,
    and the DDL or upsert statements the database lacks or spells
    its own way.
    """

    name: DialectName = DialectName.STANDARD
    open_quote = '"'
    close_quote = '"'
    paramstyle: str | None = None

    def __repr__(self) -> str:
        if self.paramstyle is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}(paramstyle={self.paramstyle!r})"

    def unsupported(self, operation: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(str(self.name), operation)

    def with_paramstyle(self, paramstyle: str | None) -> Dialect:
        """Return a copy rendering placeholders in a DB-API ``paramstyle``.

        ``None`` restores the dialect's native placeholders.

        Raises:
            ValueError: If the paramstyle is unknown.
        """
        if paramstyle is not None and paramstyle not in PARAMSTYLE_PLACEHOLDERS:
            raise ValueError(
                f"unsupported paramstyle: {paramstyle!r}. "
                f"Available: {', '.join(sorted(PARAMSTYLE_PLACEHOLDERS))}"
            )
        dialect = copy.copy(self)
        dialect.paramstyle = paramstyle
        return dialect

    @property
    def escapes_percent(self) -> bool:
        """Whether literal ``%`` in SQL must be doubled for the driver."""
        return self.paramstyle in ("format", "pyformat")

    # --- Placeholders and quoting ---

    def generate_placeholder(self, index: int) -> str:
        """Return the anonymous placeholder for the 1-based ``index``."""
        if self.paramstyle is not None:
            return PARAMSTYLE_PLACEHOLDERS[self.paramstyle].format(index)
        return self.native_placeholder(index)

    def native_placeholder(self, index: int) -> str:
        return "?"

    def quote(self, s: str) -> str:
        """Quote a string literal."""
        return "'" + s.replace("'", "''") + "'"

    def quote_simple_table_name(self, s: str) -> str:
        if self.open_quote in s:
            return s
        return self.open_quote + s + self.close_quote

    def quote_simple_column_name(self, s: str) -> str:
        if self.open_quote in s or s == "*":
            return s
        return self.open_quote + s + self.close_quote

    def quote_table_name(self, s: str) -> str:
        """Quote a possibly schema-qualified table name.

        Names containing ``(`` or ``{{`` are returned unchanged.
        """
        if "(" in s or "{{" in s:
            return s
        return ".".join(self.quote_simple_table_name(part) for part in s.split("."))

    def quote_column_name(self, s: str) -> str:
        """Quote a possibly table-qualified column name.

        Names containing ``(``, ``{{`` or ``[[`` are returned unchanged.
        """
        if "(" in s or "{{" in s or "[[" in s:
            return s
        prefix = ""
        pos = s.rfind(".")
        if pos != -1:
            prefix = self.quote_table_name(s[:pos]) + "."
            s = s[pos + 1 :]
        return prefix + self.quote_simple_column_name(s)

    def _quote_columns(self, cols: Sequence[str]) -> str:
        return ", ".join(self.quote_column_name(c) for c in cols)

    def _quote_table_with_alias(self, table: str) -> str:
        m = _SELECT_ALIAS_RE.search(table)
        if m is None:
            return self.quote_table_name(table)
        name = table[: m.start()]
        return self.quote_table_name(name) + " " + self.quote_simple_table_name(m.group(1))

    # --- SELECT clauses ---

    def build_select(
        self, cols: Sequence[str], distinct: bool = False, option: str = ""
    ) -> str:
        sql = "SELECT "
        if distinct:
            sql += "DISTINCT "
        if option:
            sql += option + " "
        if not cols:
            return sql + "*"

        parts = []
        for col in cols:
            m = _SELECT_ALIAS_RE.search(col)
            if m is None:
                parts.append(self.quote_column_name(col))
            else:
                parts.append(
                    self.quote_column_name(col[: m.start()])
                    + " AS "
                    + self.quote_simple_column_name(m.group(1))
                )
        return sql + ", ".join(parts)

    def build_from(self, tables: Sequence[str]) -> str:
        if not tables:
            return ""
        return "FROM " + ", ".join(self._quote_table_with_alias(t) for t in tables)

    def build_join(self, joins: Sequence[JoinInfo], params: Params) -> str:
        parts = []
        for j in joins:
            sql = j.join + " " + self._quote_table_with_alias(j.table)
            if j.on is not None:
                on = j.on.build(self, params)
                if on:
                    sql += " ON " + on
            parts.append(sql)
        return " ".join(parts)

    def build_where(self, exp: Expression | None, params: Params) -> str:
        if exp is not None:
            sql = exp.build(self, params)
            if sql:
                return "WHERE " + sql
        return ""

    def build_group_by(self, cols: Sequence[str]) -> str:
        if not cols:
            return ""
        return "GROUP BY " + self._quote_columns(cols)

    def build_having(self, exp: Expression | None, params: Params) -> str:
        if exp is not None:
            sql = exp.build(self, params)
            if sql:
                return "HAVING " + sql
        return ""

    def build_order_by(self, cols: Sequence[str]) -> str:
        if not cols:
            return ""
        parts = []
        for col in cols:
            m = _ORDER_DIRECTION_RE.search(col)
            if m is None:
                parts.append(self.quote_column_name(col))
            else:
                parts.append(self.quote_column_name(col[: m.start()]) + " " + m.group(1))
        return "ORDER BY " + ", ".join(parts)

    def build_limit(self, limit: int | None, offset: int | None) -> str:
        """Render LIMIT/OFFSET. ``None`` or a negative value means absent."""
        limit, offset = _as_int(limit), _as_int(offset)
        if limit < 0 and offset > 0:
            limit = MAX_LIMIT
        if limit < 0:
            return ""
        sql = f"LIMIT {limit}"
        if offset > 0:
            sql += f" OFFSET {offset}"
        return sql

    def build_order_by_and_limit(
        self,
        sql: str,
        cols: Sequence[str],
        limit: int | None,
        offset: int | None,
    ) -> str:
        order_by = self.build_order_by(cols)
        if order_by:
            sql += " " + order_by
        limit_sql = self.build_limit(limit, offset)
        if limit_sql:
            sql += " " + limit_sql
        return sql

    def build_union(self, unions: Sequence[UnionInfo], params: Params) -> str:
        parts = []
        for u in unions:
            sql = _merge_union_params(u.query.sql, u.query.params, params)
            parts.append(("UNION ALL" if u.all else "UNION") + " (" + sql + ")")
        return " ".join(parts)

    # --- Data manipulation ---

    def _assignments(self, cols: Mapping[str, Any], params: Params) -> list[str]:
        lines = []
        for name in sorted(cols):
            lines.append(self.quote_column_name(name) + "=" + self._value(cols[name], params))
        return lines

    def _value(self, value: Any, params: Params) -> str:
        if isinstance(value, Expression):
            return value.build(self, params)
        return "{:" + params.add(value) + "}"

    def insert(self, table: str, cols: Mapping[str, Any]) -> Statement:
        """Render an INSERT with columns in sorted order."""
        params = Params()
        names = sorted(cols)
        columns = [self.quote_column_name(n) for n in names]
        values = [self._value(cols[n], params) for n in names]

        if not names:
            return Statement(self.insert_default_values(table), params)
        sql = (
            f"INSERT INTO {self.quote_table_name(table)} "
            f"({', '.join(columns)}) VALUES ({', '.join(values)})"
        )
        return Statement(sql, params)

    def insert_default_values(self, table: str) -> str:
        return f"INSERT INTO {self.quote_table_name(table)} DEFAULT VALUES"

    def upsert(
        self, table: str, cols: Mapping[str, Any], constraints: Sequence[str] = ()
    ) -> Statement:
        """Render an insert that updates the row on a key conflict."""
        raise self.unsupported("upsert")

    def update(
        self, table: str, cols: Mapping[str, Any], where: Expression | None = None
    ) -> Statement:
        """Render an UPDATE. Without a condition every row is updated."""
        params = Params()
        sql = f"UPDATE {self.quote_table_name(table)} SET " + ", ".join(
            self._assignments(cols, params)
        )
        if where is not None:
            w = where.build(self, params)
            if w:
                sql += " WHERE " + w
        return Statement(sql, params)

    def delete(self, table: str, where: Expression | None = None) -> Statement:
        """Render a DELETE. Without a condition every row is deleted."""
        params = Params()
        sql = "DELETE FROM " + self.quote_table_name(table)
        if where is not None:
            w = where.build(self, params)
            if w:
                sql += " WHERE " + w
        return Statement(sql, params)

    # --- Schema manipulation ---

    def create_table(
        self, table: str, cols: Mapping[str, str], *options: str
    ) -> str:
        columns = ", ".join(
            self.quote_column_name(name) + " " + cols[name] for name in sorted(cols)
        )
        sql = f"CREATE TABLE {self.quote_table_name(table)} ({columns})"
        for opt in options:
            sql += " " + opt
        return sql

    def rename_table(self, old_name: str, new_name: str) -> str:
        return f"RENAME TABLE {self.quote_table_name(old_name)} TO {self.quote_table_name(new_name)}"

    def drop_table(self, table: str) -> str:
        return "DROP TABLE " + self.quote_table_name(table)

    def truncate_table(self, table: str) -> str:
        return "TRUNCATE TABLE " + self.quote_table_name(table)

    def add_column(self, table: str, col: str, typ: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} ADD {self.quote_column_name(col)} {typ}"

    def drop_column(self, table: str, col: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} DROP COLUMN {self.quote_column_name(col)}"

    def rename_column(
        self, table: str, old_name: str, new_name: str, definition: str = ""
    ) -> str:
        """Render a column rename.

        ``definition`` is only used by dialects that must restate the
        column type when renaming.
        """
        return (
            f"ALTER TABLE {self.quote_table_name(table)} RENAME COLUMN "
            f"{self.quote_column_name(old_name)} TO {self.quote_column_name(new_name)}"
        )

    def column_definition_query(self, table: str) -> str | None:
        """SQL returning the table definition a rename must consult, if any."""
        return None

    def alter_column(self, table: str, col: str, typ: str) -> str:
        col = self.quote_column_name(col)
        return f"ALTER TABLE {self.quote_table_name(table)} CHANGE {col} {col} {typ}"

    def add_primary_key(self, table: str, name: str, *cols: str) -> str:
        return (
            f"ALTER TABLE {self.quote_table_name(table)} ADD CONSTRAINT "
            f"{self.quote_column_name(name)} PRIMARY KEY ({self._quote_columns(cols)})"
        )

    def drop_primary_key(self, table: str, name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} DROP CONSTRAINT {self.quote_column_name(name)}"

    def add_foreign_key(
        self,
        table: str,
        name: str,
        cols: Sequence[str],
        ref_cols: Sequence[str],
        ref_table: str,
        *options: str,
    ) -> str:
        sql = (
            f"ALTER TABLE {self.quote_table_name(table)} ADD CONSTRAINT "
            f"{self.quote_column_name(name)} FOREIGN KEY ({self._quote_columns(cols)}) "
            f"REFERENCES {self.quote_table_name(ref_table)} ({self._quote_columns(ref_cols)})"
        )
        for opt in options:
            sql += " " + opt
        return sql

    def drop_foreign_key(self, table: str, name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} DROP CONSTRAINT {self.quote_column_name(name)}"

    def create_index(self, table: str, name: str, *cols: str) -> str:
        return (
            f"CREATE INDEX {self.quote_column_name(name)} ON "
            f"{self.quote_table_name(table)} ({self._quote_columns(cols)})"
        )

    def create_unique_index(self, table: str, name: str, *cols: str) -> str:
        return (
            f"CREATE UNIQUE INDEX {self.quote_column_name(name)} ON "
            f"{self.quote_table_name(table)} ({self._quote_columns(cols)})"
        )

    def drop_index(self, table: str, name: str) -> str:
        return f"DROP INDEX {self.quote_column_name(name)} ON {self.quote_table_name(table)}"
