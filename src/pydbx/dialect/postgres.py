"""PostgreSQL dialect."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydbx.dialect._base import Dialect, DialectName, Statement
from pydbx.dialect._upsert import on_conflict_upsert


class PostgresDialect(Dialect):
    """PostgreSQL: ``$n`` placeholders and ON CONFLICT upserts."""

    name = DialectName.POSTGRESQL

    def native_placeholder(self, index: int) -> str:
        return f"${index}"

    def upsert(
        self, table: str, cols: Mapping[str, Any], constraints: Sequence[str] = ()
    ) -> Statement:
        return on_conflict_upsert(self, table, cols, constraints)

    def drop_index(self, table: str, name: str) -> str:
        return "DROP INDEX " + self.quote_column_name(name)

    def rename_table(self, old_name: str, new_name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(old_name)} RENAME TO {self.quote_table_name(new_name)}"

    def alter_column(self, table: str, col: str, typ: str) -> str:
        return (
            f"ALTER TABLE {self.quote_table_name(table)} ALTER COLUMN "
            f"{self.quote_column_name(col)} {typ}"
        )
