"""SQL dialects and the driver name registry."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType

from pydbx.dialect._base import (
    PARAMSTYLE_PLACEHOLDERS,
    Dialect,
    DialectName,
    JoinInfo,
    Statement,
    UnionInfo,
)
from pydbx.dialect.mssql import MSSQLDialect
from pydbx.dialect.mysql import MySQLDialect
from pydbx.dialect.oracle import OracleDialect
from pydbx.dialect.postgres import PostgresDialect
from pydbx.dialect.sqlite import SQLiteDialect
from pydbx.dialect.standard import StandardDialect

__all__ = [
    "Dialect",
    "DialectName",
    "DialectFactory",
    "DialectRegistry",
    "JoinInfo",
    "PARAMSTYLE_PLACEHOLDERS",
    "Statement",
    "UnionInfo",
    "MSSQLDialect",
    "MySQLDialect",
    "OracleDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "StandardDialect",
    "default_registry",
]

DialectFactory = Callable[[], Dialect]
"""Callable constructing a dialect for a database driver."""

# Driver name to (dialect, DB-API paramstyle of the driver module). A
# paramstyle of None keeps the dialect's native placeholders.
_DRIVERS: Mapping[str, tuple[type[Dialect], str | None]] = MappingProxyType({
    "sqlite": (SQLiteDialect, None),
    "sqlite3": (SQLiteDialect, "qmark"),
    "mysql": (MySQLDialect, None),
    "pymysql": (MySQLDialect, "pyformat"),
    "mysqlclient": (MySQLDialect, "format"),
    "mysqldb": (MySQLDialect, "format"),
    "postgres": (PostgresDialect, None),
    "postgresql": (PostgresDialect, None),
    "pgx": (PostgresDialect, None),
    "asyncpg": (PostgresDialect, None),
    "psycopg": (PostgresDialect, "pyformat"),
    "psycopg2": (PostgresDialect, "pyformat"),
    "mssql": (MSSQLDialect, None),
    "sqlserver": (MSSQLDialect, None),
    "pyodbc": (MSSQLDialect, "qmark"),
    "pymssql": (MSSQLDialect, "pyformat"),
    "oci8": (OracleDialect, None),
    "oracle": (OracleDialect, None),
    "oracledb": (OracleDialect, "named"),
    "cx_oracle": (OracleDialect, "named"),
})


def _factory(cls: type[Dialect], paramstyle: str | None) -> DialectFactory:
    if paramstyle is None:
        return cls
    return lambda: cls().with_paramstyle(paramstyle)


class DialectRegistry:
    """Maps database driver names to dialect factories.

    Lookups of unregistered drivers resolve to :class:`StandardDialect`.
    """

    def __init__(self, factories: Mapping[str, DialectFactory] | None = None) -> None:
        self._factories: dict[str, DialectFactory] = {}
        for driver, factory in (factories or {}).items():
            self.register(driver, factory)

    def register(self, driver_name: str, factory: DialectFactory) -> None:
        self._factories[driver_name.lower()] = factory

    def get(self, driver_name: str) -> Dialect:
        factory = self._factories.get(driver_name.lower(), StandardDialect)
        return factory()

    def __contains__(self, driver_name: object) -> bool:
        return isinstance(driver_name, str) and driver_name.lower() in self._factories

    def drivers(self) -> list[str]:
        return sorted(self._factories)


def default_registry() -> DialectRegistry:
    """Build a registry knowing the common DB-API driver names.

    Python driver modules get a dialect rendering placeholders in the
    module's own paramstyle.
    """
    return DialectRegistry({
        driver: _factory(cls, paramstyle) for driver, (cls, paramstyle) in _DRIVERS.items()
    })
