"""WHERE/HAVING/JOIN conditions and ORDER BY clauses.

Conditions compile against a ``ClauseCompiler``: they emit SQL with named
placeholders and bind their values in the same step.

Typed comparisons escape their column (`` `p`.`id` > :w0 ``); ``Raw`` keeps
hand-written SQL and only rewrites its ``?`` marks, wrapping the result in
parentheses so fragments compose safely with ``AND``/``OR``.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from accessdb.errors import QueryCompositionError
from accessdb.query.compiler import (
    ClauseCompiler,
    Column,
    Query,
    is_sequence,
    to_database_format,
)

_MARK = re.compile(r"\(\s*\?\s*\)|\?")
_NAMED = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")
_NOT_EQUALS_MARK = re.compile(r"(?:!=|<>)\s?\?")
_EQUALS_MARK = re.compile(r"(?<![<>!])=\s?\?")


class Clause(ABC):
    @abstractmethod
    def compile(self, state: ClauseCompiler) -> str:
        """Return the SQL of this clause, binding values into ``state``."""


class Condition(Clause):
    """Marker base for everything usable in WHERE, HAVING and JOIN ON."""


# =============================================================================
# Typed comparisons
# =============================================================================


class Comparison(Condition):
    operator = "="

    def __init__(self, field: str | Column | Any, value: Any):
        self.field = field if isinstance(field, Column) else Column(getattr(field, "name", field))
        self.value = value

    def compile(self, state: ClauseCompiler) -> str:
        column = state.escape(self.field)
        op = self.operator
        value = self.value
        in_list = op in ("IN", "NOT IN")

        if isinstance(value, Query):
            return f"{column} {op} ({state.subquery(value)})"

        if isinstance(value, Column):
            other = state.escape(value)
            return f"{column} {op} ({other})" if in_list else f"{column} {op} {other}"

        if value is None and op in ("=", "!="):
            return f"{column} IS NULL" if op == "=" else f"{column} IS NOT NULL"

        if is_sequence(value):
            items = to_database_format(list(value))
            if op == "=":
                op = "IN"
            elif op == "!=":
                op = "NOT IN"
            elif not in_list:
                raise QueryCompositionError(
                    f"Operator '{op}' cannot compare against a list of values"
                )
            if not items:
                # an empty IN matches nothing; an empty NOT IN excludes nothing
                return "1 = 2" if op == "IN" else "1 = 1"
            return f"{column} {op} ({state.bind_many(items)})"

        placeholder = state.bind(to_database_format(value))
        return f"{column} {op} ({placeholder})" if in_list else f"{column} {op} {placeholder}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field.name!r}, {self.value!r})"


class Equals(Comparison):
    operator = "="


class NotEquals(Comparison):
    operator = "!="


class GreaterThan(Comparison):
    operator = ">"


class GreaterThanOrEquals(Comparison):
    operator = ">="


class LessThan(Comparison):
    operator = "<"


class LessThanOrEquals(Comparison):
    operator = "<="


class In(Comparison):
    operator = "IN"


class NotIn(Comparison):
    operator = "NOT IN"


class IsNull(Equals):
    def __init__(self, field: str | Column | Any):
        super().__init__(field, None)


class IsNotNull(NotEquals):
    def __init__(self, field: str | Column | Any):
        super().__init__(field, None)


class Relation(Condition):
    """Two columns that must be equal, typically a JOIN condition."""

    def __init__(self, field: str | Column, other: str | Column):
        self.field = field
        self.other = other

    def compile(self, state: ClauseCompiler) -> str:
        return f"{state.escape(self.field)} = {state.escape(self.other)}"


# =============================================================================
# Raw SQL
# =============================================================================


class Raw(Condition):
    """Hand-written SQL with ``?`` (positional) or ``:name`` (mapping) marks.

    - one value applies to every ``?`` mark
    - several values are matched to the marks left to right
    - a list expands to ``:w0, :w1``; an empty list makes the fragment ``1 = 2``
    - ``None`` turns ``= ?`` into ``IS NULL`` and ``!= ?`` into ``IS NOT NULL``
    - a ``Column`` is inlined as an identifier, a ``Select`` as a subquery
    """

    def __init__(self, sql: str, *values: Any):
        self.sql = sql
        self.values = values

    def compile(self, state: ClauseCompiler) -> str:
        return f"({self.substitute(state)})"

    def substitute(self, state: ClauseCompiler) -> str:
        sql = self.sql
        values = self.values

        if not values:
            return sql

        if len(values) == 1 and isinstance(values[0], Mapping):
            return self._substitute_named(state, values[0])

        if any(is_sequence(value) and not value for value in values):
            # under-select rather than dropping the condition
            return "1 = 2"

        if len(values) == 1 and values[0] is None:
            sql = _NOT_EQUALS_MARK.sub("IS NOT NULL", sql)
            sql = _EQUALS_MARK.sub("IS NULL", sql)

        marks = len(_MARK.findall(sql))
        if marks == 0 and len(values) == 1 and values[0] is None:
            return sql

        per_mark = list(values) * marks if len(values) == 1 else list(values)
        if marks == 0 or len(per_mark) != marks:
            raise QueryCompositionError(
                f"Condition {self.sql!r} has {marks} placeholder(s) "
                f"but {len(values)} value(s) were given"
            )

        remaining = iter(per_mark)

        def replace(match: re.Match[str]) -> str:
            value = next(remaining)
            if isinstance(value, Query):
                return f"({state.subquery(value)})"
            rendered = self._render_value(state, value)
            return rendered if match.group(0) == "?" else f"({rendered})"

        return _MARK.sub(replace, sql)

    def _render_value(self, state: ClauseCompiler, value: Any) -> str:
        if isinstance(value, Column):
            return state.escape(value)
        if is_sequence(value):
            return state.bind_many(to_database_format(list(value)))
        return state.bind(to_database_format(value))

    def _substitute_named(self, state: ClauseCompiler, values: Mapping[str, Any]) -> str:
        def replace(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in values:
                return match.group(0)
            return self._render_value(state, values[key])

        return _NAMED.sub(replace, self.sql)

    def __repr__(self) -> str:
        return f"Raw({self.sql!r})"


# =============================================================================
# Combinators
# =============================================================================


class Multiple(Condition):
    """Conditions joined with AND; parenthesised only when there are several."""

    combinator = "AND"

    def __init__(self, *conditions: Condition):
        self.conditions = conditions

    def compile(self, state: ClauseCompiler) -> str:
        parts = [sql for sql in (c.compile(state) for c in self.conditions) if sql]
        if not parts:
            return ""
        if len(parts) == 1:
            return parts[0]
        return "(" + f" {self.combinator} ".join(parts) + ")"


class MultipleOr(Multiple):
    combinator = "OR"


# =============================================================================
# ORDER BY
# =============================================================================


class OrderBy(Clause):
    direction = "ASC"

    def __init__(self, expression: str | Column):
        self.expression = expression

    def compile(self, state: ClauseCompiler) -> str:
        if isinstance(self.expression, Column):
            expression = state.escape(self.expression)
        else:
            expression = self.expression
        return f"{expression} {self.direction}"


class Ascending(OrderBy):
    direction = "ASC"


class Descending(OrderBy):
    direction = "DESC"


class Random(OrderBy):
    def __init__(self) -> None:
        super().__init__("")

    def compile(self, state: ClauseCompiler) -> str:
        return state.dialect.random_function()


class Verbatim(OrderBy):
    """An ORDER BY expression used as-is, optionally with bound values."""

    def __init__(self, expression: str, *values: Any):
        super().__init__(expression)
        self.values = values

    def compile(self, state: ClauseCompiler) -> str:
        return Raw(str(self.expression), *self.values).substitute(state)


__all__ = [
    "Clause",
    "Condition",
    "Comparison",
    "Equals",
    "NotEquals",
    "GreaterThan",
    "GreaterThanOrEquals",
    "LessThan",
    "LessThanOrEquals",
    "In",
    "NotIn",
    "IsNull",
    "IsNotNull",
    "Relation",
    "Raw",
    "Multiple",
    "MultipleOr",
    "OrderBy",
    "Ascending",
    "Descending",
    "Random",
    "Verbatim",
]
