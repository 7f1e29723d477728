"""Tests for SQL template preprocessing."""

import pytest

from pydbx import process_sql
from pydbx.dialect import MSSQLDialect, MySQLDialect, OracleDialect, PostgresDialect


class TestPlaceholders:
    @pytest.mark.parametrize(
        "dialect,expected",
        [
            pytest.param(MySQLDialect(), "INSERT INTO users (id, name, age) VALUES (?, ?, ?)", id="mysql"),
            pytest.param(PostgresDialect(), "INSERT INTO users (id, name, age) VALUES ($1, $2, $3)", id="postgres"),
            pytest.param(OracleDialect(), "INSERT INTO users (id, name, age) VALUES (:p1, :p2, :p3)", id="oracle"),
            pytest.param(
                MySQLDialect().with_paramstyle("format"),
                "INSERT INTO users (id, name, age) VALUES (%s, %s, %s)",
                id="format",
            ),
            pytest.param(
                PostgresDialect().with_paramstyle("numeric"),
                "INSERT INTO users (id, name, age) VALUES (:1, :2, :3)",
                id="numeric",
            ),
        ],
    )
    def test_sequential_markers(self, dialect, expected):
        sql, names = process_sql(dialect, "INSERT INTO users (id, name, age) VALUES ({:id}, {:name}, {:age})")
        assert sql == expected
        assert names == ["id", "name", "age"]

    def test_repeated_name(self, pg_dialect):
        sql, names = process_sql(
            pg_dialect, "SELECT * FROM users WHERE name LIKE {:keyword} OR title LIKE {:keyword}"
        )
        assert sql == "SELECT * FROM users WHERE name LIKE $1 OR title LIKE $2"
        assert names == ["keyword", "keyword"]

    def test_invalid_name_untouched(self, mysql_dialect):
        sql, names = process_sql(mysql_dialect, "SELECT * FROM users WHERE name LIKE '{:key?word}'")
        assert sql == "SELECT * FROM users WHERE name LIKE '{:key?word}'"
        assert names == []

    def test_empty(self, mysql_dialect):
        assert process_sql(mysql_dialect, "") == ("", [])

    def test_stray_brackets_untouched(self, mysql_dialect):
        text = "SELECT a[1], '{x}', '{{', '[[' FROM t"
        assert process_sql(mysql_dialect, text) == (text, [])

    def test_multiline(self, mysql_dialect):
        sql, names = process_sql(mysql_dialect, "SELECT *\nFROM t\nWHERE id={:id}")
        assert sql == "SELECT *\nFROM t\nWHERE id=?"
        assert names == ["id"]

    @pytest.mark.parametrize("paramstyle", ["format", "pyformat"])
    def test_percent_doubled_for_format_styles(self, mysql_dialect, paramstyle):
        dialect = mysql_dialect.with_paramstyle(paramstyle)
        sql, names = process_sql(dialect, "SELECT * FROM [[users]] WHERE name LIKE 'x%' AND id={:id}")
        assert sql == "SELECT * FROM `users` WHERE name LIKE 'x%%' AND id=%s"
        assert names == ["id"]

    def test_percent_kept_for_other_styles(self, mysql_dialect):
        sql, _ = process_sql(mysql_dialect.with_paramstyle("qmark"), "SELECT 5 % 2, {:x}")
        assert sql == "SELECT 5 % 2, ?"


class TestIdentifierMarkers:
    @pytest.mark.parametrize(
        "dialect,expected",
        [
            pytest.param(MySQLDialect(), "SELECT * FROM `public`.`user` WHERE `user`.`id`=1", id="mysql"),
            pytest.param(PostgresDialect(), 'SELECT * FROM "public"."user" WHERE "user"."id"=1', id="postgres"),
            pytest.param(OracleDialect(), 'SELECT * FROM "public"."user" WHERE "user"."id"=1', id="oracle"),
            pytest.param(MSSQLDialect(), "SELECT * FROM [public].[user] WHERE [user].[id]=1", id="mssql"),
        ],
    )
    def test_qualified_names(self, dialect, expected):
        sql, names = process_sql(dialect, "SELECT * FROM {{public.user}} WHERE [[user.id]]=1")
        assert sql == expected
        assert names == []

    def test_marker_with_invalid_characters_untouched(self, mysql_dialect):
        sql, _ = process_sql(mysql_dialect, "SELECT [[users.*]] FROM {{users}}")
        assert sql == "SELECT [[users.*]] FROM `users`"

    def test_markers_with_placeholders(self, pg_dialect):
        sql, names = process_sql(pg_dialect, "UPDATE {{users}} SET [[name]]={:name} WHERE [[id]]={:id}")
        assert sql == 'UPDATE "users" SET "name"=$1 WHERE "id"=$2'
        assert names == ["name", "id"]

    def test_name_with_space(self, mysql_dialect):
        sql, _ = process_sql(mysql_dialect, "SELECT [[first name]] FROM {{my-table}}")
        assert sql == "SELECT `first name` FROM `my-table`"
