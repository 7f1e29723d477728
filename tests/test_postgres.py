"""Tests for the PostgreSQL dialect."""

import pytest

from pydbx import UnsupportedOperationError


class TestPostgres:
    def test_placeholder(self, pg_dialect):
        assert pg_dialect.generate_placeholder(1) == "$1"
        assert pg_dialect.generate_placeholder(12) == "$12"

    def test_quoting(self, pg_dialect):
        assert pg_dialect.quote_column_name("users.id") == '"users"."id"'

    def test_drop_index(self, pg_dialect):
        assert pg_dialect.drop_index("users", "idx") == 'DROP INDEX "idx"'

    def test_rename_table(self, pg_dialect):
        assert pg_dialect.rename_table("users", "user") == 'ALTER TABLE "users" RENAME TO "user"'

    def test_alter_column(self, pg_dialect):
        assert pg_dialect.alter_column("users", "name", "int") == 'ALTER TABLE "users" ALTER COLUMN "name" int'

    def test_upsert(self, pg_dialect):
        stmt = pg_dialect.upsert("users", {"id": 1, "name": "James"}, ["id"])
        assert stmt.sql == (
            'INSERT INTO "users" ("id", "name") VALUES ({:p0}, {:p1}) '
            'ON CONFLICT ("id") DO UPDATE SET "id"={:p2}, "name"={:p3}'
        )

    def test_upsert_composite_target(self, pg_dialect):
        stmt = pg_dialect.upsert("t", {"a": 1}, ["a", "b"])
        assert 'ON CONFLICT ("a", "b")' in stmt.sql

    def test_upsert_requires_conflict_columns(self, pg_dialect):
        with pytest.raises(UnsupportedOperationError):
            pg_dialect.upsert("users", {"id": 1})
