"""Database handle tying a connection to a dialect and mapping policy."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import ModuleType
from typing import Any

from pydbx._utils import default_field_map
from pydbx.dialect import DialectRegistry, default_registry
from pydbx.dialect._base import Statement
from pydbx.dialect.mysql import find_column_definition
from pydbx.expression import Expression
from pydbx.mapping import FieldMapFunc, TableMapFunc, get_table_name
from pydbx.model import ModelQuery
from pydbx.query import ExecLogFunc, Executor, Query, QueryLogFunc
from pydbx.select import SelectQuery

logger = logging.getLogger(__name__)


class DB:
    """A DB-API 2.0 connection with SQL building for its dialect.

    Args:
        connection: An open DB-API connection, or ``None`` to only build SQL.
        driver_name: Driver name used to pick the dialect. Unknown names
            fall back to the standard dialect.
        registry: Driver name to dialect registry. Defaults to
            :func:`~pydbx.dialect.default_registry`.
        paramstyle: DB-API paramstyle overriding the dialect's placeholders.
        field_mapper: Naming policy for columns of unannotated fields.
        table_mapper: Resolves the table of a record.
        exec_log_func: Hook called after every statement execution.
        query_log_func: Hook called after every row fetch.
    """

    def __init__(
        self,
        connection: Executor | None,
        driver_name: str = "",
        *,
        registry: DialectRegistry | None = None,
        paramstyle: str | None = None,
        field_mapper: FieldMapFunc = default_field_map,
        table_mapper: TableMapFunc = get_table_name,
        exec_log_func: ExecLogFunc | None = None,
        query_log_func: QueryLogFunc | None = None,
    ) -> None:
        self.connection = connection
        self.driver_name = driver_name
        self.registry = registry if registry is not None else default_registry()
        self.dialect = self.registry.get(driver_name)
        if paramstyle is not None:
            self.dialect = self.dialect.with_paramstyle(paramstyle)
        self.field_mapper = field_mapper
        self.table_mapper = table_mapper
        self.exec_log_func = exec_log_func
        self.query_log_func = query_log_func
        logger.debug("using %r for driver %r", self.dialect, driver_name)

    @classmethod
    def open(cls, driver: ModuleType, *args: Any, **kwargs: Any) -> DB:
        """Connect through a DB-API driver module.

        The module name selects the dialect, so ``DB.open(sqlite3, ":memory:")``
        uses the SQLite dialect. Placeholders follow the module's ``paramstyle``.
        """
        options = {k: kwargs.pop(k) for k in (
            "registry", "paramstyle", "field_mapper", "table_mapper", "exec_log_func", "query_log_func",
        ) if k in kwargs}
        options.setdefault("paramstyle", getattr(driver, "paramstyle", None))
        connection = driver.connect(*args, **kwargs)
        return cls(connection, driver.__name__.split(".")[0], **options)

    def close(self) -> None:
        if self.connection is not None:
            self.connection.close()

    # --- Queries ---

    def new_query(self, sql: str, params: Mapping[str, Any] | None = None) -> Query:
        """Create a query from a SQL template."""
        return Query(
            self.dialect,
            self.connection,
            sql,
            params,
            field_mapper=self.field_mapper,
            exec_log_func=self.exec_log_func,
            query_log_func=self.query_log_func,
        )

    def select(self, *cols: str) -> SelectQuery:
        return SelectQuery(self).select(*cols)

    def model(self, record: Any) -> ModelQuery:
        """Start a persistence operation on a dataclass record."""
        return ModelQuery(self, record)

    def quote_table_name(self, s: str) -> str:
        return self.dialect.quote_table_name(s)

    def quote_column_name(self, s: str) -> str:
        return self.dialect.quote_column_name(s)

    # --- Data manipulation ---

    def _statement(self, stmt: Statement) -> Query:
        return self.new_query(stmt.sql, stmt.params)

    def insert(self, table: str, cols: Mapping[str, Any]) -> Query:
        return self._statement(self.dialect.insert(table, cols))

    def upsert(self, table: str, cols: Mapping[str, Any], *constraints: str) -> Query:
        return self._statement(self.dialect.upsert(table, cols, constraints))

    def update(
        self, table: str, cols: Mapping[str, Any], where: Expression | None = None
    ) -> Query:
        return self._statement(self.dialect.update(table, cols, where))

    def delete(self, table: str, where: Expression | None = None) -> Query:
        return self._statement(self.dialect.delete(table, where))

    # --- Schema manipulation ---

    def create_table(self, table: str, cols: Mapping[str, str], *options: str) -> Query:
        return self.new_query(self.dialect.create_table(table, cols, *options))

    def rename_table(self, old_name: str, new_name: str) -> Query:
        return self.new_query(self.dialect.rename_table(old_name, new_name))

    def drop_table(self, table: str) -> Query:
        return self.new_query(self.dialect.drop_table(table))

    def truncate_table(self, table: str) -> Query:
        return self.new_query(self.dialect.truncate_table(table))

    def add_column(self, table: str, col: str, typ: str) -> Query:
        return self.new_query(self.dialect.add_column(table, col, typ))

    def drop_column(self, table: str, col: str) -> Query:
        return self.new_query(self.dialect.drop_column(table, col))

    def rename_column(self, table: str, old_name: str, new_name: str) -> Query:
        """Rename a column.

        Dialects that must restate the column definition read it from the
        database first.
        """
        definition = ""
        lookup = self.dialect.column_definition_query(table)
        if lookup is not None and self.connection is not None:
            row = self.new_query(lookup).row()
            if row is not None:
                definition = find_column_definition(row[-1], old_name)
        return self.new_query(
            self.dialect.rename_column(table, old_name, new_name, definition)
        )

    def alter_column(self, table: str, col: str, typ: str) -> Query:
        return self.new_query(self.dialect.alter_column(table, col, typ))

    def add_primary_key(self, table: str, name: str, *cols: str) -> Query:
        return self.new_query(self.dialect.add_primary_key(table, name, *cols))

    def drop_primary_key(self, table: str, name: str) -> Query:
        return self.new_query(self.dialect.drop_primary_key(table, name))

    def add_foreign_key(
        self,
        table: str,
        name: str,
        cols: Sequence[str],
        ref_cols: Sequence[str],
        ref_table: str,
        *options: str,
    ) -> Query:
        return self.new_query(
            self.dialect.add_foreign_key(table, name, cols, ref_cols, ref_table, *options)
        )

    def drop_foreign_key(self, table: str, name: str) -> Query:
        return self.new_query(self.dialect.drop_foreign_key(table, name))

    def create_index(self, table: str, name: str, *cols: str) -> Query:
        return self.new_query(self.dialect.create_index(table, name, *cols))

    def create_unique_index(self, table: str, name: str, *cols: str) -> Query:
        return self.new_query(self.dialect.create_unique_index(table, name, *cols))

    def drop_index(self, table: str, name: str) -> Query:
        return self.new_query(self.dialect.drop_index(table, name))
