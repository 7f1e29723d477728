"""Shared ON CONFLICT upsert rendering."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydbx.dialect._base import Dialect, Statement


def on_conflict_upsert(
    dialect: Dialect,
    table: str,
    cols: Mapping[str, Any],
    constraints: Sequence[str],
) -> Statement:
    """Render ``INSERT ... ON CONFLICT (keys) DO UPDATE SET ...``.

    The conflict target is required; the SET clause binds its own
    copies of the values after those of the INSERT.
    """
    if not constraints:
        raise dialect.unsupported("upsert without conflict columns")
    stmt = dialect.insert(table, cols)
    lines = dialect._assignments(cols, stmt.params)
    sql = (
        f"{stmt.sql} ON CONFLICT ({dialect._quote_columns(constraints)}) "
        f"DO UPDATE SET {', '.join(lines)}"
    )
    return Statement(sql, stmt.params)
