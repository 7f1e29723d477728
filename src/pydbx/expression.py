"""Composable SQL condition fragments.

Every expression renders itself with :meth:`Expression.build`, quoting
identifiers through the dialect and binding values into the supplied
:class:`~pydbx.params.Params` under generated ``{:pN}`` placeholders.
"""

from __future__ import annotations

import dataclasses
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydbx._constants import DEFAULT_LIKE_ESCAPE
from pydbx._errors import InvalidLikeEscapeError

if TYPE_CHECKING:
    from pydbx.dialect._base import Dialect
    from pydbx.params import Params

__all__ = [
    "Expression",
    "Exp",
    "HashExp",
    "NotExp",
    "AndOrExp",
    "InExp",
    "LikeExp",
    "ExistsExp",
    "BetweenExp",
    "new_exp",
    "not_",
    "and_",
    "or_",
    "in_",
    "not_in",
    "like",
    "not_like",
    "or_like",
    "or_not_like",
    "exists",
    "not_exists",
    "between",
    "not_between",
]


class Expression(ABC):
    """A SQL fragment that can be rendered for a dialect."""

    @abstractmethod
    def build(self, dialect: Dialect, params: Params) -> str:
        """Render the fragment, binding any values into ``params``."""


def _placeholder(params: Params, value: Any) -> str:
    return "{:" + params.add(value) + "}"


@dataclass(frozen=True)
class Exp(Expression):
    """A raw SQL fragment with optional named bindings."""

    sql: str
    params: Mapping[str, Any] | None = None

    def build(self, dialect: Dialect, params: Params) -> str:
        if self.params:
            params.update(self.params)
        return self.sql


class HashExp(dict[str, Any], Expression):
    """Column to value equality conditions joined with AND.

    Keys are rendered in sorted order. ``None`` renders ``IS NULL``, a
    nested :class:`Expression` is parenthesized and a list or tuple
    becomes a set membership test.
    """

    def build(self, dialect: Dialect, params: Params) -> str:
        if not self:
            return ""

        parts = []
        for name in sorted(self):
            value = self[name]
            if value is None:
                parts.append(dialect.quote_column_name(name) + " IS NULL")
            elif isinstance(value, Expression):
                sql = value.build(dialect, params)
                if sql:
                    parts.append("(" + sql + ")")
            elif isinstance(value, (list, tuple)):
                sql = InExp(name, tuple(value)).build(dialect, params)
                if sql:
                    parts.append(sql)
            else:
                parts.append(dialect.quote_column_name(name) + "=" + _placeholder(params, value))
        return " AND ".join(parts)


@dataclass(frozen=True)
class NotExp(Expression):
    """Negation of another expression."""

    exp: Expression

    def build(self, dialect: Dialect, params: Params) -> str:
        sql = self.exp.build(dialect, params)
        if not sql:
            return ""
        return "NOT (" + sql + ")"


@dataclass(frozen=True)
class AndOrExp(Expression):
    """Expressions combined with AND or OR."""

    exps: tuple[Expression | None, ...]
    op: str = "AND"

    def build(self, dialect: Dialect, params: Params) -> str:
        parts = []
        for exp in self.exps:
            if exp is None:
                continue
            sql = exp.build(dialect, params)
            if sql:
                parts.append(sql)
        if not parts:
            return ""
        if len(parts) == 1:
            return parts[0]
        return "(" + (") " + self.op + " (").join(parts) + ")"


@dataclass(frozen=True)
class InExp(Expression):
    """Set membership test on a column."""

    col: str
    values: tuple[Any, ...] = ()
    negated: bool = False

    def build(self, dialect: Dialect, params: Params) -> str:
        if not self.values:
            return "" if self.negated else "0=1"

        values = []
        for value in self.values:
            if isinstance(value, Expression):
                values.append(value.build(dialect, params))
            elif value is None:
                values.append("NULL")
            else:
                values.append(_placeholder(params, value))

        col = dialect.quote_column_name(self.col)
        if len(values) == 1:
            return col + ("<>" if self.negated else "=") + values[0]
        op = "NOT IN" if self.negated else "IN"
        return f"{col} {op} ({', '.join(values)})"


def _check_escape(pairs: tuple[str, ...]) -> None:
    if len(pairs) % 2:
        raise InvalidLikeEscapeError(
            "LIKE escape table must contain from/to pairs",
            f"got {len(pairs)} entries: {pairs!r}",
        )


@dataclass(frozen=True)
class LikeExp(Expression):
    """Pattern match of a column against one or more values.

    Each value is escaped with the ``escape_pairs`` table, then wrapped
    in ``%`` according to ``left`` and ``right``.
    """

    col: str
    values: tuple[str, ...] = ()
    like_op: str = "LIKE"
    or_: bool = False
    left: bool = True
    right: bool = True
    escape_pairs: tuple[str, ...] = DEFAULT_LIKE_ESCAPE

    def __post_init__(self) -> None:
        _check_escape(self.escape_pairs)

    def escape(self, *pairs: str) -> LikeExp:
        """Return a copy using the given (from, to, from, to, ...) escape table."""
        _check_escape(pairs)
        return dataclasses.replace(self, escape_pairs=pairs)

    def match(self, left: bool, right: bool) -> LikeExp:
        """Return a copy with the given wildcard placement."""
        return dataclasses.replace(self, left=left, right=right)

    def operator(self, like_op: str) -> LikeExp:
        """Return a copy using another match operator, e.g. ``ILIKE``."""
        return dataclasses.replace(self, like_op=like_op)

    def _escape_value(self, value: str) -> str:
        froms = self.escape_pairs[0::2]
        tos = dict(zip(froms, self.escape_pairs[1::2]))
        patterns = [re.escape(f) for f in froms if f]
        if not patterns:
            return value
        return re.sub("|".join(patterns), lambda m: tos[m.group(0)], value)

    def build(self, dialect: Dialect, params: Params) -> str:
        if not self.values:
            return ""

        col = dialect.quote_column_name(self.col)
        parts = []
        for value in self.values:
            value = self._escape_value(str(value))
            if self.left:
                value = "%" + value
            if self.right:
                value = value + "%"
            parts.append(f"{col} {self.like_op} " + _placeholder(params, value))
        return (" OR " if self.or_ else " AND ").join(parts)


@dataclass(frozen=True)
class ExistsExp(Expression):
    """EXISTS test around a sub-query expression."""

    exp: Expression
    negated: bool = False

    def build(self, dialect: Dialect, params: Params) -> str:
        sql = self.exp.build(dialect, params)
        if not sql:
            return "" if self.negated else "0=1"
        return ("NOT EXISTS (" if self.negated else "EXISTS (") + sql + ")"


@dataclass(frozen=True)
class BetweenExp(Expression):
    """Range test on a column."""

    col: str
    from_: Any
    to: Any
    negated: bool = False

    def build(self, dialect: Dialect, params: Params) -> str:
        op = "NOT BETWEEN" if self.negated else "BETWEEN"
        low = _placeholder(params, self.from_)
        high = _placeholder(params, self.to)
        return f"{dialect.quote_column_name(self.col)} {op} {low} AND {high}"


def new_exp(sql: str, params: Mapping[str, Any] | None = None) -> Exp:
    return Exp(sql, params)


def not_(exp: Expression) -> NotExp:
    return NotExp(exp)


def and_(*exps: Expression | None) -> AndOrExp:
    return AndOrExp(tuple(exps), "AND")


def or_(*exps: Expression | None) -> AndOrExp:
    return AndOrExp(tuple(exps), "OR")


def in_(col: str, *values: Any) -> InExp:
    return InExp(col, values)


def not_in(col: str, *values: Any) -> InExp:
    return InExp(col, values, negated=True)


def _strs(values: Iterable[Any]) -> tuple[str, ...]:
    return tuple(str(v) for v in values)


def like(col: str, *values: str) -> LikeExp:
    """Match ``col`` against every value, joined with AND."""
    return LikeExp(col, _strs(values))


def not_like(col: str, *values: str) -> LikeExp:
    return LikeExp(col, _strs(values), like_op="NOT LIKE")


def or_like(col: str, *values: str) -> LikeExp:
    """Match ``col`` against any of the values, joined with OR."""
    return LikeExp(col, _strs(values), or_=True)


def or_not_like(col: str, *values: str) -> LikeExp:
    return LikeExp(col, _strs(values), like_op="NOT LIKE", or_=True)


def exists(exp: Expression) -> ExistsExp:
    return ExistsExp(exp)


def not_exists(exp: Expression) -> ExistsExp:
    return ExistsExp(exp, negated=True)


def between(col: str, from_: Any, to: Any) -> BetweenExp:
    return BetweenExp(col, from_, to)


def not_between(col: str, from_: Any, to: Any) -> BetweenExp:
    return BetweenExp(col, from_, to, negated=True)
