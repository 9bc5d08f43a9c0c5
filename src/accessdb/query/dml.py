"""INSERT, UPDATE and DELETE queries.

Values are given as a mapping of column name to value. A ``Column`` value
refers to another column and is rendered as an identifier; a ``Raw`` value
is inlined as an expression (``count = count + ?``, ``NOW()``).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from accessdb.dialect import Dialect
from accessdb.query.base import PREFIX_PARAM, TableQuery
from accessdb.query.clauses import Raw
from accessdb.query.compiler import ClauseCompiler, Column, Compiler, to_database_format


def _render_value(compiler: Compiler, state: ClauseCompiler, value: Any) -> str:
    if isinstance(value, Column):
        return compiler.escape(value)
    if isinstance(value, Raw):
        return value.substitute(state)
    return state.bind(to_database_format(value))


class _ValuesMixin:
    _values: dict[str, Any]

    def values(self, values: Mapping[str, Any]) -> Any:
        """Set the column values written by this query."""
        self._values = dict(values)
        return self


class Insert(_ValuesMixin, TableQuery):
    """``INSERT INTO t (a, b) VALUES (:p0, :p1)``.

    Renders no SQL (``None``) when no values were given.
    """

    def __init__(self, table: Any, alias: str | None = None):
        super().__init__(table, alias)
        self._values: dict[str, Any] = {}

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        if not self._values:
            return None, {}

        compiler = Compiler(dialect, namespace)
        state = compiler.section(PREFIX_PARAM)

        fields = ", ".join(compiler.escape(name) for name in self._values)
        placeholders = ", ".join(
            _render_value(compiler, state, value) for value in self._values.values()
        )

        sql = f"INSERT INTO {compiler.escape(self.table_name)} ({fields}) VALUES ({placeholders})"
        return sql, compiler.values


class Update(_ValuesMixin, TableQuery):
    """``UPDATE t SET a = :p0 WHERE ...``; ``None`` when nothing is set."""

    def __init__(self, table: Any, alias: str | None = None):
        super().__init__(table, alias)
        self._values: dict[str, Any] = {}

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        if not self._values:
            return None, {}

        compiler = Compiler(dialect, namespace)
        state = compiler.section(PREFIX_PARAM)

        assignments = []
        for name, value in self._values.items():
            rendered = _render_value(compiler, state, value)
            assignments.append(f"{compiler.escape(name)} = {rendered}")

        sql = (
            f"UPDATE {compiler.escape(self.table_name)}"
            + self._render_alias(compiler)
            + self._render_joins(compiler)
            + " SET "
            + ", ".join(assignments)
            + self._render_where(compiler)
            + self._render_limit()
        )
        return sql, compiler.values


class Delete(TableQuery):
    """``DELETE FROM t WHERE ...``, or ``DELETE a FROM t AS a`` with an alias."""

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        compiler = Compiler(dialect, namespace)

        if self.alias is not None:
            head = f"DELETE {compiler.escape(self.alias)} FROM "
        else:
            head = "DELETE FROM "

        sql = (
            head
            + compiler.escape(self.table_name)
            + self._render_alias(compiler)
            + self._render_joins(compiler)
            + self._render_where(compiler)
            + self._render_limit()
        )
        return sql, compiler.values


__all__ = ["Insert", "Update", "Delete"]
