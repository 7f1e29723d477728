"""Oracle dialect."""

from __future__ import annotations

from collections.abc import Sequence

from pydbx.dialect._base import Dialect, DialectName, _as_int


class OracleDialect(Dialect):
    """Oracle: ``:pN`` placeholders and rownum based pagination."""

    name = DialectName.ORACLE

    def native_placeholder(self, index: int) -> str:
        return f":p{index}"

    def drop_index(self, table: str, name: str) -> str:
        return "DROP INDEX " + self.quote_column_name(name)

    def rename_table(self, old_name: str, new_name: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(old_name)} RENAME TO {self.quote_table_name(new_name)}"

    def alter_column(self, table: str, col: str, typ: str) -> str:
        return f"ALTER TABLE {self.quote_table_name(table)} MODIFY {self.quote_column_name(col)} {typ}"

    def build_order_by_and_limit(
        self,
        sql: str,
        cols: Sequence[str],
        limit: int | None,
        offset: int | None,
    ) -> str:
        limit, offset = _as_int(limit), _as_int(offset)
        order_by = self.build_order_by(cols)
        if order_by:
            sql += " " + order_by

        conds = []
        if offset > 0:
            conds.append(f"rowNumId > {offset}")
        if limit >= 0:
            conds.append(f"rowNum <= {limit}")
        if not conds:
            return sql

        return (
            f"WITH USER_SQL AS ({sql}), "
            "PAGINATION AS (SELECT USER_SQL.*, rownum as rowNumId FROM USER_SQL) "
            "SELECT * FROM PAGINATION WHERE " + " AND ".join(conds)
        )
