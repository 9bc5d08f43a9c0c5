"""Shared builder state for every query bound to a table.

``TableQuery`` owns the clauses that SELECT, UPDATE and DELETE have in
common (joins, WHERE, GROUP BY, HAVING, ORDER BY, LIMIT) plus the cursor
slot. Subclasses only decide in which order the sections are glued together.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from accessdb.errors import QueryCompositionError
from accessdb.query.clauses import (
    Ascending,
    Condition,
    Descending,
    Multiple,
    MultipleOr,
    OrderBy,
    Random,
    Raw,
    Verbatim,
)
from accessdb.query.compiler import Compiler, Query

if TYPE_CHECKING:
    from accessdb.query.cursor import Cursor

PREFIX_PARAM = "p"
PREFIX_JOIN = "j"
PREFIX_WHERE = "w"
PREFIX_HAVING = "h"
PREFIX_ORDER = "o"

_RANDOM = re.compile(r"^rand(om)?\(\)$", re.IGNORECASE)
_DIRECTION = re.compile(r"^(.*) (asc|desc)$", re.IGNORECASE)


def table_name_of(table: Any) -> str:
    """Accept a table name, a schema ``Table`` or anything with ``.name``."""
    name = getattr(table, "name", table)
    if not name or not isinstance(name, str):
        raise QueryCompositionError("No table given for query")
    return name


def to_conditions(condition: Any, values: tuple[Any, ...] = ()) -> list[Condition]:
    """Normalise the accepted condition shapes into ``Condition`` objects.

    ``condition`` may be a SQL string (bound with ``values``), a
    ``Condition``, a mapping of ``{sql: value}`` or a list of strings and
    conditions.
    """
    if isinstance(condition, Condition):
        if values:
            raise QueryCompositionError("Values can only be given with a SQL string condition")
        return [condition]

    if isinstance(condition, str):
        return [Raw(condition, *values)]

    if values:
        raise QueryCompositionError("Values should be in the condition mapping")

    if isinstance(condition, Mapping):
        return [Raw(sql, value) for sql, value in condition.items()]

    if isinstance(condition, (list, tuple)):
        result: list[Condition] = []
        for part in condition:
            if isinstance(part, Condition):
                result.append(part)
            elif isinstance(part, str):
                result.append(Raw(part))
            else:
                raise QueryCompositionError(
                    f"Condition should be a string or Condition, got {type(part).__name__}"
                )
        return result

    raise QueryCompositionError(
        f"Condition should be a string or Condition, got {type(condition).__name__}"
    )


def parse_order_by(order_by: Any) -> list[OrderBy]:
    if isinstance(order_by, OrderBy):
        return [order_by]
    if isinstance(order_by, (list, tuple)):
        return [clause for part in order_by for clause in parse_order_by(part)]
    if not isinstance(order_by, str):
        raise QueryCompositionError(
            f"Order by should be a string or OrderBy, got {type(order_by).__name__}"
        )

    if "," in order_by:
        return parse_order_by([part.strip() for part in order_by.split(",")])
    if _RANDOM.match(order_by):
        return [Random()]

    match = _DIRECTION.match(order_by)
    if match:
        expression, direction = match.groups()
        if direction.lower() == "asc":
            return [Ascending(expression)]
        return [Descending(expression)]

    return [Verbatim(order_by)]


class Join:
    __slots__ = ("kind", "table", "alias", "on")

    def __init__(self, kind: str, table: str, alias: str, on: Condition):
        self.kind = kind
        self.table = table
        self.alias = alias
        self.on = on


class TableQuery(Query):
    """A query against one (optionally aliased) table."""

    def __init__(self, table: Any, alias: str | None = None):
        self.table_name = table_name_of(table)
        self.alias = alias
        self._joins: list[Join] = []
        self._where: list[Condition] = []
        self._cursor_condition: Condition | None = None
        self._group_by: list[str] = []
        self._having: list[Condition] = []
        self._order_by: list[OrderBy] = []
        self._limit: int | None = None
        self._offset: int | None = None

    @property
    def resolved_table_name(self) -> str:
        """The name columns of this table are qualified with."""
        return self.alias if self.alias is not None else self.table_name

    # -- Builder -----------------------------------------------------------

    def left_join(self, table: Any, alias: str, on: Any) -> TableQuery:
        return self._join("LEFT", table, alias, on)

    def inner_join(self, table: Any, alias: str, on: Any) -> TableQuery:
        return self._join("INNER", table, alias, on)

    def _join(self, kind: str, table: Any, alias: str, on: Any) -> TableQuery:
        condition = Multiple(*to_conditions(on))
        self._joins.append(Join(kind, table_name_of(table), alias, condition))
        return self

    def where(self, condition: Any, *values: Any) -> TableQuery:
        self._where.append(Multiple(*to_conditions(condition, values)))
        return self

    def where_or(self, conditions: Any) -> TableQuery:
        self._where.append(MultipleOr(*to_conditions(conditions)))
        return self

    def group_by(self, expression: str) -> TableQuery:
        self._group_by.append(expression)
        return self

    def having(self, condition: Any, *values: Any) -> TableQuery:
        self._having.append(Multiple(*to_conditions(condition, values)))
        return self

    def order_by(self, order_by: Any) -> TableQuery:
        self._order_by.extend(parse_order_by(order_by))
        return self

    def limit(self, limit: int | None, offset: int | None = None) -> TableQuery:
        for name, value in (("limit", limit), ("offset", offset)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise QueryCompositionError(f"{name.capitalize()} should be an integer, got {value!r}")
        self._limit = limit
        self._offset = offset
        return self

    def apply_cursor(self, cursor: Cursor) -> TableQuery:
        cursor.apply(self)
        return self

    def set_cursor_condition(self, condition: Condition | None) -> TableQuery:
        """Replace the condition owned by the applied cursor."""
        self._cursor_condition = condition
        return self

    @property
    def cursor_condition(self) -> Condition | None:
        return self._cursor_condition

    # -- Rendering ---------------------------------------------------------

    def _render_alias(self, compiler: Compiler) -> str:
        if self.alias is None:
            return ""
        return f" AS {compiler.escape(self.alias)}"

    def _render_joins(self, compiler: Compiler) -> str:
        parts = []
        for i, join in enumerate(self._joins):
            state = compiler.section(f"{PREFIX_JOIN}{i}{PREFIX_JOIN}")
            on = join.on.compile(state)
            sql = f"{join.kind} JOIN {compiler.escape(join.table)} AS {compiler.escape(join.alias)}"
            parts.append(f"{sql} ON {on}" if on else sql)
        return "".join(f" {part}" for part in parts)

    def _render_conditions(
        self, compiler: Compiler, keyword: str, conditions: list[Condition], prefix: str
    ) -> str:
        state = compiler.section(prefix)
        parts = [sql for sql in (c.compile(state) for c in conditions) if sql]
        if not parts:
            return ""
        return f" {keyword} " + " AND ".join(parts)

    def _render_where(self, compiler: Compiler) -> str:
        conditions = list(self._where)
        if self._cursor_condition is not None:
            conditions.append(self._cursor_condition)
        return self._render_conditions(compiler, "WHERE", conditions, PREFIX_WHERE)

    def _render_group_by(self) -> str:
        if not self._group_by:
            return ""
        return " GROUP BY " + ", ".join(self._group_by)

    def _render_having(self, compiler: Compiler) -> str:
        return self._render_conditions(compiler, "HAVING", self._having, PREFIX_HAVING)

    def _render_order_by(self, compiler: Compiler) -> str:
        if not self._order_by:
            return ""
        state = compiler.section(PREFIX_ORDER)
        return " ORDER BY " + ", ".join(clause.compile(state) for clause in self._order_by)

    def _render_limit(self) -> str:
        if not self._limit:
            return ""
        sql = f" LIMIT {self._limit}"
        if self._offset is not None:
            sql += f" OFFSET {self._offset}"
        return sql

    def __repr__(self) -> str:
        alias = f", alias={self.alias!r}" if self.alias else ""
        return f"{type(self).__name__}({self.table_name!r}{alias})"


__all__ = [
    "TableQuery",
    "Join",
    "table_name_of",
    "to_conditions",
    "parse_order_by",
    "PREFIX_PARAM",
    "PREFIX_JOIN",
    "PREFIX_WHERE",
    "PREFIX_HAVING",
    "PREFIX_ORDER",
]
