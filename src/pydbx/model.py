"""Insert, update and delete of mapped records."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydbx._errors import MissingPrimaryKeyError
from pydbx.dialect._base import DialectName
from pydbx.expression import HashExp
from pydbx.mapping import RecordValue, is_auto_increment
from pydbx.query import Result

if TYPE_CHECKING:
    from pydbx.db import DB
    from pydbx.query import Query


@dataclass(frozen=True)
class ModelQuery:
    """Persistence operations on one record.

    Attribute names given to :meth:`exclude`, :meth:`insert` and
    :meth:`update` are logical field names, not column names.
    """

    db: DB
    record: Any
    excluded: tuple[str, ...] = ()
    context: Any = None
    value: RecordValue = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", RecordValue(self.record, self.db.field_mapper))

    @property
    def table_name(self) -> str:
        return self.db.table_mapper(self.record)

    def exclude(self, *attrs: str) -> ModelQuery:
        """Return a query that leaves the given fields out of writes."""
        return dataclasses.replace(self, excluded=attrs)

    def with_context(self, context: Any) -> ModelQuery:
        return dataclasses.replace(self, context=context)

    def insert(self, *attrs: str) -> Result:
        """Insert the record, optionally limited to ``attrs``.

        A single primary key holding ``None`` or zero is left to the
        database and the generated value is written back to the record.
        """
        cols = self.value.columns(attrs, self.excluded)
        pk = self.value.pk()

        pk_name = ""
        if len(pk) == 1:
            name, pk_value = next(iter(pk.items()))
            if is_auto_increment(pk_value):
                cols.pop(name, None)
                pk_name = name

        query = self.db.insert(self.table_name, cols).with_context(self.context)
        if not pk_name:
            return query.execute()

        result = self._insert_returning_pk(query, pk_name)
        self.value.mapping.db_name_map[pk_name].set_value(self.record, result.last_insert_id)
        return result

    def _insert_returning_pk(self, query: Query, pk_name: str) -> Result:
        if self.db.dialect.name != DialectName.POSTGRESQL:
            return query.execute()

        # Postgres drivers do not report the generated key through lastrowid.
        returning = self.db.new_query(
            query.sql + " RETURNING " + self.db.quote_column_name(pk_name), query.params
        ).with_context(self.context)
        return returning.execute_returning()

    def update(self, *attrs: str) -> Result:
        """Update the record's row, optionally limited to ``attrs``."""
        pk = self._require_pk()
        cols = self.value.columns(attrs, self.excluded)
        for name in pk:
            cols.pop(name, None)
        return self.db.update(self.table_name, cols, HashExp(pk)).with_context(self.context).execute()

    def delete(self) -> Result:
        """Delete the record's row."""
        pk = self._require_pk()
        return self.db.delete(self.table_name, HashExp(pk)).with_context(self.context).execute()

    def _require_pk(self) -> dict[str, Any]:
        pk = self.value.pk()
        if not pk:
            raise MissingPrimaryKeyError(
                f"{type(self.record).__name__} has no primary key",
                f"record {self.record!r} cannot be addressed by primary key",
            )
        return pk
