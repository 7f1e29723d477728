"""pydbx - DB-agnostic SQL building and record mapping over DB-API connections."""

from __future__ import annotations

__version__ = "0.1.0"

from pydbx._errors import (
    CompositePrimaryKeyError,
    DbxError,
    InvalidLikeEscapeError,
    InvalidModelError,
    MissingParameterError,
    MissingPrimaryKeyError,
    ModelError,
    UnsupportedOperationError,
)
from pydbx._utils import default_field_map
from pydbx.db import DB
from pydbx.dialect import (
    Dialect,
    DialectName,
    DialectRegistry,
    MSSQLDialect,
    MySQLDialect,
    OracleDialect,
    PostgresDialect,
    SQLiteDialect,
    StandardDialect,
    Statement,
    default_registry,
)
from pydbx.expression import (
    AndOrExp,
    BetweenExp,
    Exp,
    ExistsExp,
    Expression,
    HashExp,
    InExp,
    LikeExp,
    NotExp,
    and_,
    between,
    exists,
    in_,
    like,
    new_exp,
    not_,
    not_between,
    not_exists,
    not_in,
    not_like,
    or_,
    or_like,
    or_not_like,
)
from pydbx.mapping import (
    ColumnMapping,
    FieldInfo,
    Scanner,
    TableModel,
    db_field,
    get_column_mapping,
    get_table_name,
    is_scannable,
)
from pydbx.model import ModelQuery
from pydbx.params import Params
from pydbx.query import Query, Result
from pydbx.select import SelectQuery
from pydbx.template import process_sql

__all__ = [
    "DB",
    "Query",
    "Result",
    "SelectQuery",
    "ModelQuery",
    "Params",
    "Statement",
    "process_sql",
    # expressions
    "Expression",
    "Exp",
    "HashExp",
    "NotExp",
    "AndOrExp",
    "InExp",
    "LikeExp",
    "ExistsExp",
    "BetweenExp",
    "new_exp",
    "not_",
    "and_",
    "or_",
    "in_",
    "not_in",
    "like",
    "not_like",
    "or_like",
    "or_not_like",
    "exists",
    "not_exists",
    "between",
    "not_between",
    # dialects
    "Dialect",
    "DialectName",
    "DialectRegistry",
    "default_registry",
    "StandardDialect",
    "SQLiteDialect",
    "MySQLDialect",
    "PostgresDialect",
    "MSSQLDialect",
    "OracleDialect",
    # mapping
    "ColumnMapping",
    "FieldInfo",
    "Scanner",
    "TableModel",
    "db_field",
    "default_field_map",
    "get_column_mapping",
    "get_table_name",
    "is_scannable",
    # errors
    "DbxError",
    "MissingParameterError",
    "UnsupportedOperationError",
    "InvalidLikeEscapeError",
    "ModelError",
    "InvalidModelError",
    "MissingPrimaryKeyError",
    "CompositePrimaryKeyError",
]
