"""SQL dialect abstraction for the query builder and the migration engine.

Provides a ``Dialect`` protocol, the three builder protocols a dialect hands
out for DDL, and a registry of the supported engines. Queries, cursors and
the migration engine hold a ``Dialect`` and never a concrete driver class.

Manifesto:
    The same ``Select`` must render byte-exact SQL for MySQL and for SQLite,
    and the same declared schema must migrate both. Everything that differs
    between engines lives behind one interface.

    - **One interface:** Dialect protocol for escaping, types and DDL
    - **Named gaps:** Unsupported constructs raise ``NotSupportedError``
    - **Stateless:** Dialects are shared singletons in the registry

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                     Dialect Capability Set                        │
    └──────────────────────────────────────────────────────────────────┘

    Query / Migration code:
    ┌────────────────────────────────────────────────────────────────┐
    │  d.escape_identifier("p.id")        d.column_definition(f)     │
    │  d.create_table_builder().foreign_key(f)                       │
    │  d.alter_table_builder().change_field("name", new_field)       │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌──────────────────────────────┐  ┌──────────────────────────────┐
    │ MySQLDialect                 │  │ SQLiteDialect                │
    │ `p`.`id`     RAND()          │  │ "p"."id"     RANDOM()        │
    │ CHANGE/MODIFY COLUMN         │  │ NotSupported for ALTER of    │
    │ ADD/DROP/RENAME INDEX        │  │ column types and indexes     │
    └──────────────────────────────┘  └──────────────────────────────┘

Examples:
    >>> from accessdb.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.escape_identifier("p.id")
    '"p"."id"'
    >>> d.random_function()
    'RANDOM()'

Guardrails:
    ❌ DON'T: Import MySQLDialect in query or migration code
    ✅ DO: Accept a Dialect and default through get_dialect/default_dialect

    ❌ DON'T: Return "" for a construct the dialect cannot express
    ✅ DO: Raise NotSupportedError so callers can tell it from a DB failure

Tags:
    dialect, sql, ddl, portability, mysql, sqlite, accessdb

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from accessdb.dialects.mysql import MySQLDialect
from accessdb.dialects.sqlite import SQLiteDialect
from accessdb.errors import ConfigError
from accessdb.schema.model import Field, Index, Schema, Table
from accessdb.schema.types import FieldType


@runtime_checkable
class CreateTableBuilder(Protocol):
    """Fragments of a CREATE TABLE statement."""

    def primary_key(self, field: Field) -> str:
        """``PRIMARY KEY (...)``, or ``""`` when declared inline."""
        ...

    def foreign_key(self, field: Field) -> str:
        """``FOREIGN KEY``; the field must be a ``Reference``."""
        ...

    def index(self, index: Index) -> str:
        ...

    def table_options(self, table: Table) -> str:
        ...


@runtime_checkable
class AlterTableBuilder(Protocol):
    """One ALTER TABLE alteration per call."""

    def rename_table(self, name: str) -> str: ...

    def add_field(self, field: Field) -> str: ...

    def remove_field(self, name: str) -> str: ...

    def change_field(self, old_name: str, new: Field) -> str: ...

    def modify_field(self, field: Field) -> str: ...

    def rename_field(self, old_name: str, new_name: str) -> str: ...

    def add_index(self, index: Index) -> str: ...

    def remove_index(self, name: str) -> str: ...

    def rename_index(self, old_name: str, new_name: str) -> str: ...


@runtime_checkable
class CreateDatabaseBuilder(Protocol):
    def create_options(self, schema: Schema) -> str: ...


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target engine, or
    raises ``NotSupportedError`` when the engine cannot express it.
    """

    @property
    def name(self) -> str:
        """Dialect name (e.g. ``'sqlite'``)."""
        ...

    paramstyle: str
    has_lock_support: bool

    def escape_identifier(self, identifier: Any) -> str:
        """Quote an identifier; ``a.b`` becomes two quoted parts."""
        ...

    def random_function(self) -> str:
        ...

    def debug_value(self, value: Any) -> str:
        """SQL literal for a value (used for DEFAULT clauses)."""
        ...

    # -- DDL ----------------------------------------------------------------

    def type_definition(self, field_type: FieldType) -> str:
        ...

    def field_definition(self, field: Field) -> str:
        ...

    def column_definition(self, field: Field) -> str:
        ...

    def index_definition(self, index: Index) -> str:
        ...

    def create_table_builder(self) -> CreateTableBuilder:
        ...

    def alter_table_builder(self) -> AlterTableBuilder:
        ...

    def create_database_builder(self) -> CreateDatabaseBuilder:
        ...


# =========================================================================
# Registry / Factory
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
    "sqlite": SQLiteDialect(),
}


def get_dialect(name: str) -> Dialect:
    """Get a dialect by name.

    Raises:
        ConfigError: If ``name`` is not registered.
    """
    key = name.lower()
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{name}'. Supported: {available_dialects()}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a dialect under ``name`` (case-insensitive)."""
    _DIALECTS[name.lower()] = dialect


def available_dialects() -> list[str]:
    return sorted(_DIALECTS)


def default_dialect() -> Dialect:
    """Dialect used when a query is rendered without one."""
    return _DIALECTS["mysql"]


def resolve_dialect(dialect: Dialect | str | None) -> Dialect:
    if dialect is None:
        return default_dialect()
    if isinstance(dialect, str):
        return get_dialect(dialect)
    return dialect


__all__ = [
    "Dialect",
    "CreateTableBuilder",
    "AlterTableBuilder",
    "CreateDatabaseBuilder",
    "get_dialect",
    "register_dialect",
    "available_dialects",
    "default_dialect",
    "resolve_dialect",
]
