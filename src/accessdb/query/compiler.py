"""Query rendering machinery.

A query renders in a single pass: every placeholder is allocated at the
moment its value is bound, so the SQL text and the value map can never
disagree.

Placeholder names are ``:<namespace><prefix><n>``:

- ``prefix`` names the clause section (``w`` WHERE, ``h`` HAVING, ``o``
  ORDER BY, ``p`` SET/VALUES, ``j<i>j`` the i-th JOIN) and ``n`` counts
  within that section.
- ``namespace`` is empty for the outermost query. A nested query is
  rendered under its parent's namespace extended with ``z<k>`` (condition
  subquery), ``s<k>`` (virtual field subquery) or ``u<i>`` (union member).

Because every section prefix and every nesting prefix is distinct, names
are unique within one rendered statement no matter how deep the nesting.
"""

from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from accessdb.dialect import Dialect, resolve_dialect
from accessdb.dialects.base import DATE_FORMAT, DATETIME_FORMAT

SEQUENCE_TYPES = (list, tuple, set, frozenset)

_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class Column:
    """A reference to a column, rendered as an escaped identifier.

    Used wherever a value should be another column instead of a bound
    parameter, e.g. ``Insert(...).values({"copy_of": Column("name")})``.
    """

    name: str

    def __str__(self) -> str:
        return self.name

    def qualified(self, table: str) -> Column:
        """Prefix with ``table.`` unless the name is already qualified."""
        if "." in self.name:
            return self
        return Column(f"{table}.{self.name}")


def to_database_format(value: Any) -> Any:
    """Convert a Python value to what the driver should receive."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)) or value is None:
        return value
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, SEQUENCE_TYPES):
        return [to_database_format(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value)


def is_sequence(value: Any) -> bool:
    return isinstance(value, SEQUENCE_TYPES)


class Compiler:
    """State of one render: dialect, namespace and the collected values."""

    def __init__(self, dialect: Dialect, namespace: str = ""):
        self.dialect = dialect
        self.namespace = namespace
        self.values: dict[str, Any] = {}
        self._subqueries = 0

    def escape(self, identifier: Any) -> str:
        return self.dialect.escape_identifier(identifier)

    def section(self, prefix: str) -> ClauseCompiler:
        return ClauseCompiler(self, prefix)

    def bind(self, name: str, value: Any) -> str:
        key = f"{self.namespace}{name}"
        self.values[key] = value
        return f":{key}"

    def nested(self, query: Query, prefix: str) -> str:
        """Render ``query`` under ``namespace + prefix`` and adopt its values."""
        sql, values = query.compile(self.dialect, f"{self.namespace}{prefix}")
        self.values.update(values)
        return sql or ""

    def condition_subquery(self, query: Query) -> str:
        # one counter for the whole statement, so WHERE/HAVING/JOIN never clash
        prefix = f"z{self._subqueries}"
        self._subqueries += 1
        return self.nested(query, prefix)


class ClauseCompiler:
    """Placeholder allocation for one clause section."""

    def __init__(self, compiler: Compiler, prefix: str):
        self.compiler = compiler
        self.prefix = prefix
        self._index = 0

    @property
    def dialect(self) -> Dialect:
        return self.compiler.dialect

    def escape(self, identifier: Any) -> str:
        return self.compiler.escape(identifier)

    def bind(self, value: Any) -> str:
        name = f"{self.prefix}{self._index}"
        self._index += 1
        return self.compiler.bind(name, value)

    def bind_many(self, values: Iterable[Any]) -> str:
        return ", ".join(self.bind(value) for value in values)

    def subquery(self, query: Query) -> str:
        return self.compiler.condition_subquery(query)


class Query(ABC):
    """Base of every query: renders to ``(sql, values)`` on demand.

    Rendering never mutates the query, so it may be repeated any number of
    times with identical output. A query whose ``sql`` is ``None`` has
    nothing to execute (e.g. an UPDATE without values).
    """

    def render(self, dialect: Dialect | str | None = None) -> tuple[str | None, dict[str, Any]]:
        return self.compile(resolve_dialect(dialect), "")

    def get_sql(self, dialect: Dialect | str | None = None) -> str | None:
        return self.render(dialect)[0]

    def get_values(self, dialect: Dialect | str | None = None) -> dict[str, Any]:
        return self.render(dialect)[1]

    def to_runnable_sql(self, dialect: Dialect | str | None = None) -> str | None:
        """Render with every bound value inlined as a dialect literal.

        Meant for logs and copy-paste debugging only; never execute the
        result in place of the parameterised statement.

        Example::

            Select("users").where("id = ?", 3).to_runnable_sql("mysql")
            # 'SELECT `users`.* FROM `users` WHERE (id = 3)'
        """
        resolved = resolve_dialect(dialect)
        sql, values = self.compile(resolved, "")
        if sql is None:
            return None

        def inline(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in values:
                return match.group(0)
            return resolved.debug_value(values[name])

        return _PLACEHOLDER.sub(inline, sql)

    @abstractmethod
    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        """Render under a placeholder namespace (empty at the top level)."""


__all__ = [
    "Column",
    "Compiler",
    "ClauseCompiler",
    "Query",
    "to_database_format",
    "is_sequence",
]
