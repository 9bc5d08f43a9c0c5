"""SELECT and UNION queries."""

from __future__ import annotations

from typing import Any

from accessdb.dialect import Dialect
from accessdb.errors import UnionMisuseError
from accessdb.query.base import TableQuery
from accessdb.query.clauses import Condition
from accessdb.query.compiler import Compiler

PREFIX_SUBQUERY_VIRTUAL = "s"
PREFIX_UNION = "u"


class Select(TableQuery):
    """``SELECT`` from one table.

    Example::

        query = Select("projects", "p").where("p.owner_id = ?", 1).order_by("id ASC")
        query.render("mysql")
        # ('SELECT `p`.* FROM `projects` AS `p` WHERE (p.owner_id = :w0) ORDER BY id ASC',
        #  {'w0': 1})
    """

    def __init__(
        self,
        table: Any,
        alias: str | None = None,
        virtual_fields: dict[str, str | Select] | None = None,
    ):
        super().__init__(table, alias)
        self._select: str | None = None
        self._virtual_fields: dict[str, str | Select] = dict(virtual_fields or {})

    def select(self, fields: str) -> Select:
        """Replace the default ``table.*`` field list."""
        self._select = fields
        return self

    def add_virtual_field(self, alias: str, value: str | Select) -> Select:
        """Add a computed ``expr AS alias`` field; ``value`` may be a subquery."""
        self._virtual_fields[alias] = value
        return self

    def _render_select(self, compiler: Compiler) -> str:
        if self._select is not None:
            sql = f"SELECT {self._select}"
        else:
            sql = f"SELECT {compiler.escape(self.resolved_table_name)}.*"

        subqueries = 0
        for alias, value in self._virtual_fields.items():
            escaped = compiler.escape(alias)
            if isinstance(value, Select):
                nested = compiler.nested(value, f"{PREFIX_SUBQUERY_VIRTUAL}{subqueries}")
                subqueries += 1
                sql += f", ({nested}) AS {escaped}"
            else:
                sql += f", {value} AS {escaped}"
        return sql

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        compiler = Compiler(dialect, namespace)
        sql = (
            self._render_select(compiler)
            + f" FROM {compiler.escape(self.table_name)}"
            + self._render_alias(compiler)
            + self._render_joins(compiler)
            + self._render_where(compiler)
            + self._render_group_by()
            + self._render_having(compiler)
            + self._render_order_by(compiler)
            + self._render_limit()
        )
        return sql, compiler.values


class Union(Select):
    """``SELECT ... UNION SELECT ...``.

    Only ORDER BY, LIMIT and page-style cursors apply to the union as a
    whole; everything else belongs on the member queries and raises
    ``UnionMisuseError``.
    """

    def __init__(self, first: Select, *more: Select):
        super().__init__("__union__")
        self._queries: list[Select] = [first, *more]

    @property
    def queries(self) -> list[Select]:
        return list(self._queries)

    def add_query(self, query: Select) -> Union:
        self._queries.append(query)
        return self

    def _misuse(self, what: str) -> UnionMisuseError:
        return UnionMisuseError(f"{what} is not supported for UNION queries")

    def select(self, fields: str) -> Select:
        raise self._misuse("select()")

    def add_virtual_field(self, alias: str, value: str | Select) -> Select:
        raise self._misuse("add_virtual_field()")

    def where(self, condition: Any, *values: Any) -> Select:
        raise self._misuse("where()")

    def where_or(self, conditions: Any) -> Select:
        raise self._misuse("where_or()")

    def having(self, condition: Any, *values: Any) -> Select:
        raise self._misuse("having()")

    def group_by(self, expression: str) -> Select:
        raise self._misuse("group_by()")

    def left_join(self, table: Any, alias: str, on: Any) -> Select:
        raise self._misuse("left_join()")

    def inner_join(self, table: Any, alias: str, on: Any) -> Select:
        raise self._misuse("inner_join()")

    def set_cursor_condition(self, condition: Condition | None) -> Select:
        if condition is not None:
            raise self._misuse("A cursor condition")
        return super().set_cursor_condition(None)

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        compiler = Compiler(dialect, namespace)
        members = [
            compiler.nested(query, f"{PREFIX_UNION}{i}")
            for i, query in enumerate(self._queries)
        ]
        sql = " UNION ".join(members)
        order_by = self._render_order_by(compiler)
        limit = self._render_limit()
        if order_by or limit:
            sql = f"({sql})"
        return sql + order_by + limit, compiler.values


__all__ = ["Select", "Union"]
