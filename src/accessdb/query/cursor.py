"""Cursor pagination strategies for ``Select`` queries.

A cursor writes into two places on the query: its LIMIT/OFFSET and its
cursor slot (``TableQuery.set_cursor_condition``). Both are replaced, never
appended to, so applying the same cursor twice renders the same SQL.

Example::

    cursor = PageCursor(page_size=20)
    query = Select("projects").order_by("id ASC")

    cursor.set_page(3)
    query.apply_cursor(cursor)
    query.get_sql()
    # 'SELECT `projects`.* FROM `projects` ORDER BY id ASC LIMIT 20 OFFSET 40'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from accessdb.errors import QueryCompositionError
from accessdb.query.base import TableQuery
from accessdb.query.clauses import GreaterThan, LessThan, NotIn
from accessdb.query.compiler import Column

DEFAULT_PAGE_SIZE = 50


class Cursor(ABC):
    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        self.set_page_size(page_size)

    @property
    def page_size(self) -> int:
        return self._page_size

    def set_page_size(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise QueryCompositionError(f"Page size should be a positive integer, got {page_size!r}")
        self._page_size = page_size

    @abstractmethod
    def apply(self, query: TableQuery) -> None:
        """Set the query's limit and cursor condition."""


class PageCursor(Cursor):
    """Classic ``LIMIT n OFFSET m`` pages. Pages 0 and 1 are both the first page."""

    def __init__(self, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE):
        super().__init__(page_size)
        self.set_page(page)

    @property
    def page(self) -> int:
        return self._page

    def set_page(self, page: int = 0) -> None:
        self._page = page

    @property
    def offset(self) -> int:
        return max(self._page - 1, 0) * self._page_size

    def apply(self, query: TableQuery) -> None:
        query.set_cursor_condition(None)
        query.limit(self._page_size, self.offset)


class OffsetCursor(Cursor):
    """Keyset pagination on one column, starting after ``offset``.

    An unqualified ``field`` is qualified with the query's alias or table
    name when the cursor is applied.
    """

    def __init__(
        self,
        offset: Any = None,
        field: str | Column = "id",
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        super().__init__(page_size)
        self._offset = offset
        self.field = field if isinstance(field, Column) else Column(field)

    @property
    def offset(self) -> Any:
        return self._offset

    def set_offset(self, offset: Any) -> None:
        self._offset = offset

    def _condition(self, column: Column, offset: Any) -> Any:
        raise NotImplementedError

    def apply(self, query: TableQuery) -> None:
        if self._offset is None:
            query.set_cursor_condition(None)
        else:
            column = self.field.qualified(query.resolved_table_name)
            query.set_cursor_condition(self._condition(column, self._offset))
        query.limit(self._page_size)


class MaxValueCursor(OffsetCursor):
    """Rows with ``field > offset``; pair with ``ORDER BY field ASC``."""

    def _condition(self, column: Column, offset: Any) -> GreaterThan:
        return GreaterThan(column, offset)


class MinValueCursor(OffsetCursor):
    """Rows with ``field < offset``; pair with ``ORDER BY field DESC``."""

    def _condition(self, column: Column, offset: Any) -> LessThan:
        return LessThan(column, offset)


class CurrentIdsCursor(Cursor):
    """Excludes every id already seen, for randomly ordered result sets."""

    def __init__(self, ids: Iterable[Any] = (), page_size: int = DEFAULT_PAGE_SIZE):
        super().__init__(page_size)
        self._ids: list[Any] = []
        self.add_current_ids(ids)

    @property
    def current_ids(self) -> list[Any]:
        return list(self._ids)

    def add_current_ids(self, ids: Iterable[Any]) -> None:
        seen = set(self._ids)
        for item in ids:
            if item not in seen:
                seen.add(item)
                self._ids.append(item)

    def apply(self, query: TableQuery) -> None:
        if self._ids:
            column = Column(f"{query.resolved_table_name}.id")
            query.set_cursor_condition(NotIn(column, list(self._ids)))
        else:
            query.set_cursor_condition(None)
        query.limit(self._page_size)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Cursor",
    "PageCursor",
    "OffsetCursor",
    "MaxValueCursor",
    "MinValueCursor",
    "CurrentIdsCursor",
]
