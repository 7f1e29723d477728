"""Standard ANSI SQL dialect, used for unregistered drivers."""

from __future__ import annotations

from pydbx.dialect._base import Dialect, DialectName


class StandardDialect(Dialect):
    """Double-quoted identifiers, ``?`` placeholders and LIMIT/OFFSET."""

    name = DialectName.STANDARD
