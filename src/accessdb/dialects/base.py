"""Behaviour shared by the concrete dialects.

Identifier quoting, default-value literals and column definitions differ
between engines only in a few tokens, so the concrete dialects subclass
``BaseDialect`` and override those tokens.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from accessdb.errors import NotSupportedError
from accessdb.schema.model import Field, Index
from accessdb.schema.types import FieldType

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


class BaseDialect:
    """Common implementation of the ``Dialect`` protocol."""

    #: Quote character for identifiers
    quote: str = '"'
    #: DB-API paramstyle the driver expects for named placeholders
    paramstyle: str = "named"
    #: Whether LOCK TABLES / UNLOCK TABLES are available
    has_lock_support: bool = False

    _type_definitions: Mapping[type[FieldType], Callable[[Any], str]] = {}

    @property
    def name(self) -> str:
        raise NotImplementedError

    # -- Identifiers -------------------------------------------------------

    def escape_identifier(self, identifier: Any) -> str:
        """Quote an identifier; dots separate qualified parts.

        >>> MySQLDialect().escape_identifier("p.id")
        '`p`.`id`'
        """
        name = str(getattr(identifier, "name", identifier))
        q = self.quote
        escaped = name.replace(q, q + q)
        return f"{q}{escaped}{q}".replace(".", f"{q}.{q}")

    def random_function(self) -> str:
        raise NotImplementedError

    # -- Literals ----------------------------------------------------------

    def debug_value(self, value: Any) -> str:
        """Render a value as an SQL literal (DDL defaults, debug output)."""
        if value is None:
            return "NULL"
        if isinstance(value, enum.Enum):
            value = value.value
        if isinstance(value, bool):
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return self.debug_binary_value(bytes(value))
        if isinstance(value, datetime):
            value = value.strftime(DATETIME_FORMAT)
        elif isinstance(value, date):
            value = value.strftime(DATE_FORMAT)
        return self.debug_string_value(str(value))

    def debug_string_value(self, value: str) -> str:
        raise NotImplementedError

    def debug_binary_value(self, value: bytes) -> str:
        return "0x" + value.hex().upper()

    # -- Types / columns ---------------------------------------------------

    def type_definition(self, field_type: FieldType) -> str:
        render = self._type_definitions.get(type(field_type))
        if render is None:
            raise NotSupportedError(
                f"Unsupported type for {self.name}: {type(field_type).__name__}"
            ).with_context(dialect=self.name)
        return render(field_type)

    def field_definition(self, field: Field) -> str:
        """``TYPE NULL|NOT NULL [DEFAULT x]`` plus dialect key suffixes."""
        parts = [
            self.type_definition(field.type),
            "NULL" if field.nullable else "NOT NULL",
        ]

        if field.has_default and not callable(field.default):
            parts.append(f"DEFAULT {self.debug_value(field.default)}")

        parts.extend(self._key_suffixes(field))
        return " ".join(parts)

    def column_definition(self, field: Field) -> str:
        """Escaped name followed by the field definition."""
        return f"{self.escape_identifier(field.name)} {self.field_definition(field)}"

    def _key_suffixes(self, field: Field) -> list[str]:
        return []

    def index_definition(self, index: Index) -> str:
        kind = "UNIQUE INDEX" if index.unique else "INDEX"
        columns = ", ".join(self.escape_identifier(name) for name in index.fields)
        return f"{kind} {self.escape_identifier(index.name)} ({columns})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = [
    "BaseDialect",
    "DATETIME_FORMAT",
    "DATE_FORMAT",
]
