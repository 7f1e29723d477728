"""Microsoft SQL Server dialect."""

from __future__ import annotations

from collections.abc import Sequence

from pydbx.dialect._base import Dialect, DialectName, _as_int


class MSSQLDialect(Dialect):
    """SQL Server: bracket quoting and OFFSET/FETCH pagination."""

    name = DialectName.MSSQL
    open_quote = "["
    close_quote = "]"

    def rename_table(self, old_name: str, new_name: str) -> str:
        return f"sp_rename {self.quote(old_name)}, {self.quote(new_name)}"

    def rename_column(
        self, table: str, old_name: str, new_name: str, definition: str = ""
    ) -> str:
        return (
            f"sp_rename {self.quote(table + '.' + old_name)}, "
            f"{self.quote(new_name)}, 'COLUMN'"
        )

    def alter_column(self, table: str, col: str, typ: str) -> str:
        return (
            f"ALTER TABLE {self.quote_table_name(table)} ALTER COLUMN "
            f"{self.quote_column_name(col)} {typ}"
        )

    def build_order_by_and_limit(
        self,
        sql: str,
        cols: Sequence[str],
        limit: int | None,
        offset: int | None,
    ) -> str:
        limit, offset = _as_int(limit), _as_int(offset)
        order_by = self.build_order_by(cols)
        if limit < 0 and offset < 0:
            return sql + " " + order_by if order_by else sql

        # OFFSET/FETCH is only valid after an ORDER BY.
        sql += " " + (order_by or "ORDER BY (SELECT NULL)")
        sql += f" OFFSET {max(offset, 0)} ROWS"
        if limit >= 0:
            sql += f" FETCH NEXT {limit} ROWS ONLY"
        return sql
