"""MySQL dialect."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydbx.dialect._base import Dialect, DialectName, Statement

_COLUMN_LINE_RE = re.compile(r"^\s*`(.*?)`\s+(.*?),?$", re.MULTILINE)


def find_column_definition(create_sql: str, column: str) -> str:
    """Extract a column's definition from ``SHOW CREATE TABLE`` output."""
    for m in _COLUMN_LINE_RE.finditer(create_sql):
        if m.group(1) == column:
            return m.group(2)
    return ""


class MySQLDialect(Dialect):
    """MySQL: backtick quoting and ON DUPLICATE KEY UPDATE upserts."""

    name = DialectName.MYSQL
    open_quote = "`"
    close_quote = "`"

    def insert_default_values(self, table: str) -> str:
        return f"INSERT INTO {self.quote_table_name(table)} () VALUES ()"

    def upsert(
        self, table: str, cols: Mapping[str, Any], constraints: Sequence[str] = ()
    ) -> Statement:
        stmt = self.insert(table, cols)
        lines = self._assignments(cols, stmt.params)
        return Statement(
            stmt.sql + " ON DUPLICATE KEY UPDATE " + ", ".join(lines), stmt.params
        )

    def rename_column(
        self, table: str, old_name: str, new_name: str, definition: str = ""
    ) -> str:
        sql = (
            f"ALTER TABLE {self.quote_table_name(table)} CHANGE "
            f"{self.quote_column_name(old_name)} {self.quote_column_name(new_name)}"
        )
        if definition:
            sql += " " + definition
        return sql

    def column_definition_query(self, table: str) -> str | None:
        return "SHOW CREATE TABLE " + self.quote_table_name(table)

    def drop_primary_key(self, table: str, name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} DROP PRIMARY KEY"

    def drop_foreign_key(self, table: str, name: str) -> str:
        return (
            f"ALTER TABLE {self.quote_table_name(table)} DROP FOREIGN KEY "
            f"{self.quote_column_name(name)}"
        )
