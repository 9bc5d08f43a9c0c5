"""SQLite dialect: double-quoted identifiers and a reduced ALTER TABLE.

SQLite expresses the primary key inline (``INTEGER NOT NULL PRIMARY KEY
AUTOINCREMENT``), cannot change a column's type, and has no ALTER-time or
CREATE DATABASE support. Each of those gaps raises ``NotSupportedError``,
except the two that are valid no-ops in CREATE TABLE: the separate primary
key clause and non-unique indexes.
"""

from __future__ import annotations

from accessdb.errors import NotSupportedError, PreconditionViolationError
from accessdb.schema import types
from accessdb.schema.model import Field, Index, Schema, Table

from .base import BaseDialect


class SQLiteDialect(BaseDialect):
    """SQLite dialect."""

    quote = '"'
    paramstyle = "named"
    has_lock_support = False

    _type_definitions = {
        types.Boolean: lambda _: "INTEGER",
        types.Date: lambda _: "DATE",
        types.DateTime: lambda _: "DATETIME",
        types.EnumType: lambda _: "TEXT",
        types.Integer: lambda _: "INTEGER",
        types.Float: lambda _: "REAL",
        types.VarChar: lambda t: f"VARCHAR({t.size})",
        types.VarBinary: lambda _: "BLOB",
        types.Text: lambda _: "TEXT",
        types.Json: lambda _: "TEXT",
        types.Reference: lambda _: "INTEGER",
    }

    @property
    def name(self) -> str:
        return "sqlite"

    def random_function(self) -> str:
        return "RANDOM()"

    def debug_string_value(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def debug_binary_value(self, value: bytes) -> str:
        return f"X'{value.hex().upper()}'"

    def _key_suffixes(self, field: Field) -> list[str]:
        suffixes = []
        if field.primary_key:
            suffixes.append("PRIMARY KEY")
        if field.auto_increment:
            suffixes.append("AUTOINCREMENT")
        return suffixes

    def create_table_builder(self) -> SQLiteCreateTableBuilder:
        return SQLiteCreateTableBuilder(self)

    def alter_table_builder(self) -> SQLiteAlterTableBuilder:
        return SQLiteAlterTableBuilder(self)

    def create_database_builder(self) -> SQLiteCreateDatabaseBuilder:
        return SQLiteCreateDatabaseBuilder(self)


class SQLiteCreateTableBuilder:
    def __init__(self, dialect: SQLiteDialect):
        self._dialect = dialect

    def primary_key(self, field: Field) -> str:
        # declared inline by the column definition
        return ""

    def foreign_key(self, field: Field) -> str:
        if not isinstance(field.type, types.Reference):
            raise PreconditionViolationError(
                f"Foreign key '{field.name}' must be a reference field, "
                f"got {field.type.type_name}"
            ).with_context(dialect=self._dialect.name)
        escape = self._dialect.escape_identifier
        return (
            f"FOREIGN KEY ({escape(field.name)}) "
            f"REFERENCES {escape(field.type.table)} ({escape('id')})"
        )

    def index(self, index: Index) -> str:
        # non-unique indexes have no CREATE TABLE form in SQLite
        if not index.unique:
            return ""
        columns = ", ".join(self._dialect.escape_identifier(name) for name in index.fields)
        return f"UNIQUE ({columns})"

    def table_options(self, table: Table) -> str:
        return ""


class SQLiteAlterTableBuilder:
    def __init__(self, dialect: SQLiteDialect):
        self._dialect = dialect

    def _unsupported(self, what: str) -> NotSupportedError:
        return NotSupportedError(f"SQLite does not support {what}").with_context(
            dialect=self._dialect.name
        )

    def rename_table(self, name: str) -> str:
        return f"RENAME TO {self._dialect.escape_identifier(name)}"

    def add_field(self, field: Field) -> str:
        # SQLite always appends; the AFTER hint has no equivalent
        return f"ADD COLUMN {self._dialect.column_definition(field)}"

    def remove_field(self, name: str) -> str:
        return f"DROP COLUMN {self._dialect.escape_identifier(name)}"

    def change_field(self, old_name: str, new: Field) -> str:
        raise self._unsupported("changing fields")

    def modify_field(self, field: Field) -> str:
        raise self._unsupported("modifying fields")

    def rename_field(self, old_name: str, new_name: str) -> str:
        escape = self._dialect.escape_identifier
        return f"RENAME COLUMN {escape(old_name)} TO {escape(new_name)}"

    def add_index(self, index: Index) -> str:
        raise self._unsupported("adding indexes in alter tables")

    def remove_index(self, name: str) -> str:
        raise self._unsupported("removing indexes in alter tables")

    def rename_index(self, old_name: str, new_name: str) -> str:
        raise self._unsupported("renaming indexes in alter tables")


class SQLiteCreateDatabaseBuilder:
    def __init__(self, dialect: SQLiteDialect):
        self._dialect = dialect

    def create_options(self, schema: Schema) -> str:
        raise NotSupportedError(
            "SQLite does not support creating databases"
        ).with_context(dialect=self._dialect.name)


__all__ = [
    "SQLiteDialect",
    "SQLiteCreateTableBuilder",
    "SQLiteAlterTableBuilder",
    "SQLiteCreateDatabaseBuilder",
]
