"""Passthrough query for hand-written SQL."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from accessdb.dialect import Dialect
from accessdb.query.compiler import Query

_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


class RawQuery(Query):
    """SQL and values used exactly as given, for every dialect.

    Placeholders must already use the ``:name`` form the executor expects.
    Nested inside another query (``In("id", RawQuery(...))``), every bound
    placeholder is renamed under the nesting namespace so it cannot collide
    with the outer query's names.
    """

    def __init__(self, sql: str, values: Mapping[str, Any] | None = None):
        self.sql = sql
        self.values = dict(values or {})

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        if not namespace:
            return self.sql, dict(self.values)

        def rename(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in self.values:
                return match.group(0)
            return f":{namespace}{name}"

        sql = _PLACEHOLDER.sub(rename, self.sql)
        return sql, {f"{namespace}{name}": value for name, value in self.values.items()}

    def __repr__(self) -> str:
        return f"RawQuery({self.sql!r})"


__all__ = ["RawQuery"]
