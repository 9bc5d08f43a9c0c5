"""Schema model: fields, indexes, tables and schemas.

Everything here is an immutable value object. A declared ``Schema`` and the
``Schema`` described by a live database are compared structurally by the
migration planner, so two definitions with the same fields and indexes are
interchangeable regardless of where they came from.

Example::

    from accessdb.schema import Field, Index, Schema, Table, types

    users = Table(
        "users",
        fields=(
            Field("name", types.VarChar(50), "Dave"),
            Field("role", types.VarChar(30), nullable=True),
        ),
        indexes=(Index("name_index", "name"),),
        created_at=True,
    )
    schema = Schema("app", tables=(users,))
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from accessdb.errors import SchemaDefinitionError
from accessdb.schema.types import DateTime, FieldType, Integer, VarChar

CREATED_AT_FIELD = "created_at"
UPDATED_AT_FIELD = "updated_at"
DELETED_AT_FIELD = "deleted_at"


class Charset(str, Enum):
    UTF8 = "utf8mb4"


class Collate(str, Enum):
    DEFAULT = "utf8mb4_general_ci"


class Engine(str, Enum):
    DEFAULT = "InnoDB"


class _NoDefault:
    """Marker for "no default value"; ``None`` is a valid default."""

    _instance: _NoDefault | None = None

    def __new__(cls) -> _NoDefault:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT: Any = _NoDefault()


def _name_of(value: Any) -> str:
    return getattr(value, "name", value)


# =============================================================================
# FIELD / INDEX
# =============================================================================


@dataclass(frozen=True)
class Field:
    """A table column.

    ``default=None`` declares a ``DEFAULT NULL`` column and therefore makes
    the field nullable unless ``nullable`` is given explicitly. ``after`` and
    ``renamed_from`` are migration hints and take no part in equality.
    """

    name: str
    type: FieldType = dataclasses.field(default_factory=VarChar)
    default: Any = NO_DEFAULT
    nullable: bool = None  # type: ignore[assignment]
    primary_key: bool = False
    auto_increment: bool = False
    virtual: bool = False
    after: str | None = dataclasses.field(default=None, compare=False)
    renamed_from: str | None = dataclasses.field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.nullable is None:
            object.__setattr__(self, "nullable", self.default is None)
        if self.after is not None:
            object.__setattr__(self, "after", _name_of(self.after))

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def with_changes(self, **changes: Any) -> Field:
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class Index:
    """A named, ordered list of columns, optionally unique."""

    name: str
    fields: tuple[str, ...]
    unique: bool = False
    renamed_from: str | None = dataclasses.field(default=None, compare=False)

    def __post_init__(self) -> None:
        fields = self.fields
        if isinstance(fields, str) or not isinstance(fields, (list, tuple)):
            fields = (fields,)
        names = tuple(_name_of(item) for item in fields)
        if not names:
            raise SchemaDefinitionError(f"Index '{self.name}' has no fields")
        object.__setattr__(self, "fields", names)


# =============================================================================
# TABLE / SCHEMA
# =============================================================================


def id_field() -> Field:
    """The implicit auto-increment primary key every table carries."""
    return Field("id", Integer(), primary_key=True, auto_increment=True)


@dataclass(frozen=True)
class Table:
    """A table definition.

    Besides the declared ``fields``, every table has an implicit ``id``
    primary key and, when the matching flags are set, ``created_at``,
    ``updated_at`` and ``deleted_at`` columns. ``columns()`` yields them in
    DDL order.
    """

    name: str
    fields: tuple[Field, ...] = ()
    indexes: tuple[Index, ...] = ()
    created_at: bool = False
    updated_at: bool = False
    deleted_at: bool = False
    charset: Charset = Charset.UTF8
    collate: Collate = Collate.DEFAULT
    engine: Engine = Engine.DEFAULT
    renamed_from: str | None = dataclasses.field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "indexes", tuple(self.indexes))

        if not self.name:
            raise SchemaDefinitionError("No table name given")

        _ensure_unique("field", self.name, [f.name for f in self.fields])
        _ensure_unique("index", self.name, [i.name for i in self.indexes])

        known = set(self.field_names())
        for index in self.indexes:
            missing = [name for name in index.fields if name not in known]
            if missing:
                raise SchemaDefinitionError(
                    f"Index '{index.name}' on '{self.name}' references unknown "
                    f"field(s): {', '.join(missing)}"
                ).with_context(table=self.name)

    def columns(self) -> Iterator[Field]:
        declared = {f.name for f in self.fields}
        if "id" not in declared:
            yield id_field()
        yield from self.fields
        if self.created_at and CREATED_AT_FIELD not in declared:
            yield Field(CREATED_AT_FIELD, DateTime())
        if self.updated_at and UPDATED_AT_FIELD not in declared:
            yield Field(UPDATED_AT_FIELD, DateTime())
        if self.deleted_at and DELETED_AT_FIELD not in declared:
            yield Field(DELETED_AT_FIELD, DateTime(), None)

    def stored_columns(self) -> list[Field]:
        return [f for f in self.columns() if not f.virtual]

    def field_names(self) -> list[str]:
        return [f.name for f in self.columns()]

    def field(self, name: str) -> Field | None:
        for candidate in self.columns():
            if candidate.name == name:
                return candidate
        return None

    def has_field(self, name: str) -> bool:
        return self.field(name) is not None

    def index(self, name: str) -> Index | None:
        for candidate in self.indexes:
            if candidate.name == name:
                return candidate
        return None

    def with_field(self, field: Field) -> Table:
        return dataclasses.replace(self, fields=(*self.fields, field))

    def with_index(self, index: Index) -> Table:
        return dataclasses.replace(self, indexes=(*self.indexes, index))

    def is_builtin_datetime_field(self, name: str) -> bool:
        return (
            (self.created_at and name == CREATED_AT_FIELD)
            or (self.updated_at and name == UPDATED_AT_FIELD)
            or (self.deleted_at and name == DELETED_AT_FIELD)
        )


@dataclass(frozen=True)
class Schema:
    """A database: a named set of tables plus its default charset/collation."""

    name: str
    tables: tuple[Table, ...] = ()
    charset: Charset = Charset.UTF8
    collate: Collate = Collate.DEFAULT

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", tuple(self.tables))
        _ensure_unique("table", self.name, [t.name for t in self.tables])

    def table(self, name: str) -> Table | None:
        for candidate in self.tables:
            if candidate.name == name:
                return candidate
        return None

    def has_table(self, name: str) -> bool:
        return self.table(name) is not None

    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def with_table(self, table: Table) -> Schema:
        return dataclasses.replace(self, tables=(*self.tables, table))


def _ensure_unique(kind: str, owner: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise SchemaDefinitionError(
                f"Duplicate {kind} name '{name}' in '{owner}'"
            )
        seen.add(name)


__all__ = [
    "CREATED_AT_FIELD",
    "UPDATED_AT_FIELD",
    "DELETED_AT_FIELD",
    "Charset",
    "Collate",
    "Engine",
    "NO_DEFAULT",
    "Field",
    "Index",
    "Table",
    "Schema",
    "id_field",
]
