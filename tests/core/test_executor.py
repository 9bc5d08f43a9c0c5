"""Tests for DBAPIExecutor against an in-memory sqlite3 database."""

from __future__ import annotations

import sqlite3

import pytest

from accessdb.errors import QueryError
from accessdb.executor import DBAPIExecutor, to_pyformat
from accessdb.protocols import Executor
from accessdb.query import CreateTable, Delete, Insert, RawQuery, Select, Update
from accessdb.schema import Table


# =========================================================================
# Placeholder translation
# =========================================================================


class TestToPyformat:
    def test_named_placeholders(self) -> None:
        assert (
            to_pyformat("SELECT * FROM `t` WHERE `id` = :w0 AND `x` IN (:w1, :w2)")
            == "SELECT * FROM `t` WHERE `id` = %(w0)s AND `x` IN (%(w1)s, %(w2)s)"
        )

    def test_nested_namespaces(self) -> None:
        assert to_pyformat("IN (:z0w0)") == "IN (%(z0w0)s)"

    def test_percent_is_doubled(self) -> None:
        assert to_pyformat("name LIKE '%a' AND id = :w0") == "name LIKE '%%a' AND id = %(w0)s"

    def test_casts_are_left_alone(self) -> None:
        assert to_pyformat("x::int = :w0") == "x::int = %(w0)s"


class _FakeCursor:
    rowcount = 1
    description = None

    def __init__(self, log: list):
        self.log = log

    def execute(self, sql: str, params: dict | None = None) -> None:
        self.log.append((sql, params))

    def fetchall(self) -> list:
        return []

    def close(self) -> None:
        pass


class _FakeConnection:
    def __init__(self) -> None:
        self.log: list = []

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self.log)


class TestPyformatDriver:
    def test_mysql_rewrites_placeholders(self) -> None:
        conn = _FakeConnection()
        executor = DBAPIExecutor(conn, "mysql")
        executor.run(Select("users").where("id = ?", 7))
        assert conn.log == [
            ("SELECT `users`.* FROM `users` WHERE (id = %(w0)s)", {"w0": 7}),
        ]

    def test_no_values_passes_sql_untouched(self) -> None:
        conn = _FakeConnection()
        DBAPIExecutor(conn, "mysql").execute("SELECT '100%'")
        assert conn.log == [("SELECT '100%'", None)]


# =========================================================================
# sqlite3 round trips
# =========================================================================


@pytest.mark.integration
class TestSQLite:
    @pytest.fixture
    def users(self, users_table: Table, executor: DBAPIExecutor) -> Table:
        executor.run(CreateTable(users_table))
        return users_table

    def test_is_executor(self, executor: DBAPIExecutor) -> None:
        assert isinstance(executor, Executor)

    def test_insert_and_select(self, users: Table, executor: DBAPIExecutor) -> None:
        assert executor.run(
            Insert(users).values(
                {"name": "Ada", "status": "ACTIVE", "created_at": "2024-01-01 00:00:00",
                 "updated_at": "2024-01-01 00:00:00"}
            )
        ) == 1

        rows = executor.query(*Select(users).select("name, role, status").render("sqlite"))
        assert rows == [{"name": "Ada", "role": None, "status": "ACTIVE"}]

    def test_default_value_applied(self, users: Table, executor: DBAPIExecutor) -> None:
        executor.run(
            Insert(users).values(
                {"status": "ACTIVE", "created_at": "2024-01-01 00:00:00",
                 "updated_at": "2024-01-01 00:00:00"}
            )
        )
        rows = executor.query(*Select(users).select("name").render("sqlite"))
        assert rows == [{"name": "Dave"}]

    def test_update_and_delete_rowcounts(self, users: Table, executor: DBAPIExecutor) -> None:
        for name in ("a", "b", "c"):
            executor.run(
                Insert(users).values(
                    {"name": name, "status": "ACTIVE", "created_at": "x", "updated_at": "x"}
                )
            )

        assert executor.run(Update(users).values({"status": "BANNED"}).where("name != ?", "a")) == 2
        assert executor.run(Delete(users).where({"status = ?": "BANNED"})) == 2
        assert executor.query("SELECT COUNT(*) AS n FROM users") == [{"n": 1}]

    def test_empty_update_is_not_executed(self, executor: DBAPIExecutor) -> None:
        # the table does not exist; an executed statement would fail
        assert executor.run(Update("missing")) == 0

    def test_raw_query(self, executor: DBAPIExecutor) -> None:
        rows = executor.query(*RawQuery("SELECT :a + :b AS total", {"a": 1, "b": 2}).render("sqlite"))
        assert rows == [{"total": 3}]

    def test_failure_wrapped(self, executor: DBAPIExecutor) -> None:
        with pytest.raises(QueryError) as exc_info:
            executor.execute("SELECT * FROM missing")
        error = exc_info.value
        assert isinstance(error.cause, sqlite3.OperationalError)
        assert error.context.sql == "SELECT * FROM missing"
        assert error.context.dialect == "sqlite"
