"""DB-API executor.

Adapts an already-open DB-API 2.0 connection (``sqlite3``,
``mysql.connector``, ``PyMySQL``) to the ``Executor`` protocol. The executor
never connects, commits or closes; that lifecycle belongs to the caller.

Queries render ``:name`` placeholders. SQLite's ``named`` paramstyle takes
them as-is; for ``pyformat`` drivers they are rewritten to ``%(name)s`` and
literal percent signs are doubled.

Example::

    import sqlite3

    conn = sqlite3.connect(":memory:")
    executor = DBAPIExecutor(conn, "sqlite")
    executor.run(CreateTable(users))
    executor.run(Insert(users).values({"name": "Dave"}))
    rows = executor.query(*Select(users).render("sqlite"))
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from accessdb.dialect import Dialect, resolve_dialect
from accessdb.errors import QueryError
from accessdb.logging import get_logger
from accessdb.query.compiler import Query

logger = get_logger(__name__)

_NAMED_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def to_pyformat(sql: str) -> str:
    """Rewrite ``:name`` placeholders to ``%(name)s``."""
    return _NAMED_PLACEHOLDER.sub(r"%(\1)s", sql.replace("%", "%%"))


class DBAPIExecutor:
    """``Executor`` over a DB-API connection."""

    def __init__(self, connection: Any, dialect: Dialect | str | None = None):
        self._connection = connection
        self._dialect = resolve_dialect(dialect)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def connection(self) -> Any:
        return self._connection

    def _prepare(self, sql: str, params: Mapping[str, Any] | None) -> tuple[str, dict[str, Any]]:
        values = dict(params or {})
        if values and self._dialect.paramstyle == "pyformat":
            sql = to_pyformat(sql)
        return sql, values

    def _cursor(self, sql: str, params: Mapping[str, Any] | None) -> Any:
        statement, values = self._prepare(sql, params)
        cursor = self._connection.cursor()
        try:
            if values:
                cursor.execute(statement, values)
            else:
                cursor.execute(statement)
        except Exception as e:
            cursor.close()
            raise QueryError(f"Query failed: {e}", cause=e).with_context(
                sql=sql, dialect=self._dialect.name
            ) from e

        logger.debug("query.executed", sql=sql, dialect=self._dialect.name)
        return cursor

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> int:
        """Execute a statement and return the affected row count."""
        cursor = self._cursor(sql, params)
        try:
            return max(cursor.rowcount, 0)
        finally:
            cursor.close()

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Execute a query and return its rows as dicts."""
        cursor = self._cursor(sql, params)
        try:
            columns = [desc[0] for desc in cursor.description or ()]
            return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def run(self, query: Query) -> int:
        """Render ``query`` for this executor's dialect and execute it.

        Returns 0 without touching the connection when the query renders no
        SQL (an empty UPDATE, an empty LOCK TABLES).
        """
        sql, values = query.render(self._dialect)
        if sql is None:
            return 0
        return self.execute(sql, values)


__all__ = [
    "DBAPIExecutor",
    "to_pyformat",
]
