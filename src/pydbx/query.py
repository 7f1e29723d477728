"""Executable SQL queries over a DB-API 2.0 connection."""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable, Mapping
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Protocol

from pydbx._errors import MissingParameterError
from pydbx._utils import default_field_map
from pydbx.dialect._base import Dialect
from pydbx.mapping import FieldMapFunc, populate
from pydbx.params import Params
from pydbx.template import process_sql

logger = logging.getLogger(__name__)


class Executor(Protocol):
    """The part of a DB-API 2.0 connection used to run queries."""

    def cursor(self) -> Any: ...


@dataclass(frozen=True)
class Result:
    """Outcome of a statement execution."""

    rows_affected: int
    last_insert_id: Any = None


ExecLogFunc = Callable[[Any, float, str, Result | None, Exception | None], None]
"""Called after each execution with (context, elapsed ms, sql, result, error)."""

QueryLogFunc = Callable[[Any, float, str, list[Any] | None, Exception | None], None]
"""Called after each fetch with (context, elapsed ms, sql, rows, error)."""


class Query:
    """A SQL template bound to a dialect, an executor and parameter values.

    Queries are immutable: :meth:`bind` and :meth:`with_context` return
    new queries, so one query can serve as a template for many
    executions.
    """

    def __init__(
        self,
        dialect: Dialect,
        executor: Executor | None,
        sql: str,
        params: Mapping[str, Any] | None = None,
        *,
        field_mapper: FieldMapFunc = default_field_map,
        context: Any = None,
        exec_log_func: ExecLogFunc | None = None,
        query_log_func: QueryLogFunc | None = None,
    ) -> None:
        self.dialect = dialect
        self.executor = executor
        self.sql = sql
        self.raw_sql, self.placeholders = process_sql(dialect, sql)
        self.params = Params(params or {})
        self.field_mapper = field_mapper
        self.context = context
        self.exec_log_func = exec_log_func
        self.query_log_func = query_log_func

    def __repr__(self) -> str:
        return f"Query({self.sql!r}, params={dict(self.params)!r})"

    def _replace(self, **changes: Any) -> Query:
        q = copy.copy(self)
        for name, value in changes.items():
            setattr(q, name, value)
        return q

    def bind(self, params: Mapping[str, Any]) -> Query:
        """Return a query with ``params`` merged over the bound values."""
        merged = self.params.copy()
        merged.update(params)
        return self._replace(params=merged)

    def with_context(self, context: Any) -> Query:
        """Return a query carrying an opaque context to the logging hooks."""
        return self._replace(context=context)

    def values(self) -> list[Any]:
        """Bound values in placeholder occurrence order.

        Raises:
            MissingParameterError: If a placeholder has no bound value.
        """
        values = []
        for name in self.placeholders:
            if name not in self.params:
                raise MissingParameterError(name)
            values.append(self.params[name])
        return values

    def log_sql(self) -> str:
        """The template with bound values inlined. For logging only."""
        sql = self.sql
        for name, value in self.params.items():
            sql = sql.replace("{:" + name + "}", self._literal(value))
        return sql

    def _literal(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, str):
            return self.dialect.quote(value)
        if isinstance(value, (bytes, bytearray)):
            return "0x" + value.hex()
        return str(value)

    def _cursor(self) -> Any:
        if self.executor is None:
            raise RuntimeError("query has no executor")
        return closing(self.executor.cursor())

    def execute(self) -> Result:
        """Run a statement that returns no rows."""
        return self._execute(returning=False)

    def execute_returning(self) -> Result:
        """Run an INSERT ... RETURNING of a single key.

        The first value of the returned row becomes ``last_insert_id``.
        Logged and reported to the exec hook like :meth:`execute`.
        """
        return self._execute(returning=True)

    def _execute(self, returning: bool) -> Result:
        values = self.values()
        result = None
        error = None
        start = time.perf_counter()
        try:
            with self._cursor() as cursor:
                cursor.execute(self.raw_sql, values)
                if returning:
                    row = cursor.fetchone()
                    result = Result(cursor.rowcount, row[0] if row else None)
                else:
                    result = Result(cursor.rowcount, getattr(cursor, "lastrowid", None))
        except Exception as exc:
            error = exc
            raise
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug("[%.2fms] Execute SQL: %s", elapsed, self.log_sql())
            if self.exec_log_func is not None:
                self.exec_log_func(self.context, elapsed, self.log_sql(), result, error)
        return result

    def _fetch(self, limit: int | None = None) -> tuple[list[str], list[tuple[Any, ...]]]:
        values = self.values()
        rows = None
        error = None
        start = time.perf_counter()
        try:
            with self._cursor() as cursor:
                cursor.execute(self.raw_sql, values)
                columns = [d[0] for d in cursor.description or ()]
                if limit == 1:
                    row = cursor.fetchone()
                    rows = [] if row is None else [tuple(row)]
                else:
                    rows = [tuple(r) for r in cursor.fetchall()]
        except Exception as exc:
            error = exc
            raise
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug("[%.2fms] Query SQL: %s", elapsed, self.log_sql())
            if self.query_log_func is not None:
                self.query_log_func(self.context, elapsed, self.log_sql(), rows, error)
        return columns, rows

    def rows(self) -> list[dict[str, Any]]:
        """All result rows as column name to value mappings."""
        columns, rows = self._fetch()
        return [dict(zip(columns, r)) for r in rows]

    def one(self, record_type: type | None = None) -> Any:
        """The first result row, or ``None`` when there is none.

        With ``record_type`` the row is populated into a new record,
        otherwise it is returned as a column to value mapping.
        """
        columns, rows = self._fetch(limit=1)
        if not rows:
            return None
        row = dict(zip(columns, rows[0]))
        if record_type is None:
            return row
        return populate(record_type, row, self.field_mapper)

    def all(self, record_type: type | None = None) -> list[Any]:
        """All result rows, populated into records when ``record_type`` is given."""
        rows = self.rows()
        if record_type is None:
            return rows
        return [populate(record_type, r, self.field_mapper) for r in rows]

    def row(self) -> tuple[Any, ...] | None:
        """The first result row as a tuple, or ``None``."""
        _, rows = self._fetch(limit=1)
        return rows[0] if rows else None

    def column(self) -> list[Any]:
        """The first column of every result row."""
        _, rows = self._fetch()
        return [r[0] for r in rows]
