"""SQLite dialect."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydbx.dialect._base import Dialect, DialectName, Statement
from pydbx.dialect._upsert import on_conflict_upsert


class SQLiteDialect(Dialect):
    """SQLite: backtick quoting, ``?`` placeholders, limited ALTER TABLE."""

    name = DialectName.SQLITE
    open_quote = "`"
    close_quote = "`"

    def upsert(
        self, table: str, cols: Mapping[str, Any], constraints: Sequence[str] = ()
    ) -> Statement:
        return on_conflict_upsert(self, table, cols, constraints)

    def rename_table(self, old_name: str, new_name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(old_name)} RENAME TO {self.quote_table_name(new_name)}"

    def drop_index(self, table: str, name: str) -> str:
        return "DROP INDEX " + self.quote_column_name(name)

    def truncate_table(self, table: str) -> str:
        return "DELETE FROM " + self.quote_table_name(table)

    def drop_column(self, table: str, col: str) -> str:
        raise self.unsupported("dropping columns")

    def rename_column(
        self, table: str, old_name: str, new_name: str, definition: str = ""
    ) -> str:
        raise self.unsupported("renaming columns")

    def alter_column(self, table: str, col: str, typ: str) -> str:
        raise self.unsupported("altering columns")

    def add_primary_key(self, table: str, name: str, *cols: str) -> str:
        raise self.unsupported("adding primary keys")

    def drop_primary_key(self, table: str, name: str) -> str:
        raise self.unsupported("dropping primary keys")

    def add_foreign_key(
        self,
        table: str,
        name: str,
        cols: Sequence[str],
        ref_cols: Sequence[str],
        ref_table: str,
        *options: str,
    ) -> str:
        raise self.unsupported("adding foreign keys")

    def drop_foreign_key(self, table: str, name: str) -> str:
        raise self.unsupported("dropping foreign keys")
