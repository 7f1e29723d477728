"""Shared test fixtures."""

import pytest

from pydbx import DB
from pydbx.dialect.mssql import MSSQLDialect
from pydbx.dialect.mysql import MySQLDialect
from pydbx.dialect.oracle import OracleDialect
from pydbx.dialect.postgres import PostgresDialect
from pydbx.dialect.sqlite import SQLiteDialect
from pydbx.dialect.standard import StandardDialect
from pydbx.params import Params


@pytest.fixture
def standard_dialect():
    return StandardDialect()


@pytest.fixture
def sqlite_dialect():
    return SQLiteDialect()


@pytest.fixture
def mysql_dialect():
    return MySQLDialect()


@pytest.fixture
def pg_dialect():
    return PostgresDialect()


@pytest.fixture
def mssql_dialect():
    return MSSQLDialect()


@pytest.fixture
def oracle_dialect():
    return OracleDialect()


@pytest.fixture
def params():
    return Params()


@pytest.fixture
def mysql_db():
    """A MySQL flavoured handle without a connection, for SQL building."""
    return DB(None, "mysql")

