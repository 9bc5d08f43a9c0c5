"""MySQL-family dialect: back-tick identifiers, ``RAND()``, full ALTER support.

Also used for MariaDB. Named placeholders are rendered as ``:name`` by the
query builder; the executor rewrites them to ``%(name)s`` for
``mysql.connector`` and ``PyMySQL``.
"""

from __future__ import annotations

from accessdb.errors import PreconditionViolationError
from accessdb.schema import types
from accessdb.schema.model import Field, Index, Schema, Table

from .base import BaseDialect


def _enum_definition(field_type: types.EnumType) -> str:
    cases = ", ".join(f'"{case}"' for case in field_type.cases)
    return f"ENUM({cases})"


class MySQLDialect(BaseDialect):
    """MySQL dialect."""

    quote = "`"
    paramstyle = "pyformat"
    has_lock_support = True

    _type_definitions = {
        types.Boolean: lambda _: "INT",
        types.Date: lambda _: "DATE",
        types.DateTime: lambda _: "DATETIME",
        types.EnumType: _enum_definition,
        types.Integer: lambda _: "INT",
        types.Float: lambda _: "REAL",
        types.VarChar: lambda t: f"VARCHAR({t.size})",
        types.VarBinary: lambda t: f"VARBINARY({t.size})",
        types.Text: lambda _: "TEXT",
        types.Json: lambda _: "JSON",
        types.Reference: lambda _: "INT",
    }

    @property
    def name(self) -> str:
        return "mysql"

    def random_function(self) -> str:
        return "RAND()"

    def debug_string_value(self, value: str) -> str:
        escaped = (
            value.replace("\\", "\\\\")
            .replace("\0", "\\0")
            .replace("'", "\\'")
            .replace('"', '\\"')
        )
        return f'"{escaped}"'

    def _key_suffixes(self, field: Field) -> list[str]:
        return ["AUTO_INCREMENT"] if field.auto_increment else []

    def create_table_builder(self) -> MySQLCreateTableBuilder:
        return MySQLCreateTableBuilder(self)

    def alter_table_builder(self) -> MySQLAlterTableBuilder:
        return MySQLAlterTableBuilder(self)

    def create_database_builder(self) -> MySQLCreateDatabaseBuilder:
        return MySQLCreateDatabaseBuilder(self)


class MySQLCreateTableBuilder:
    def __init__(self, dialect: MySQLDialect):
        self._dialect = dialect

    def primary_key(self, field: Field) -> str:
        if not isinstance(field.type, types.Integer):
            raise PreconditionViolationError(
                f"Primary key '{field.name}' must be an integer field, "
                f"got {field.type.type_name}"
            ).with_context(dialect=self._dialect.name)
        return f"PRIMARY KEY ({self._dialect.escape_identifier(field.name)})"

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
        return self._dialect.index_definition(index)

    def table_options(self, table: Table) -> str:
        return (
            f"DEFAULT CHARSET={table.charset.value} "
            f"COLLATE={table.collate.value} "
            f"ENGINE={table.engine.value}"
        )


class MySQLAlterTableBuilder:
    def __init__(self, dialect: MySQLDialect):
        self._dialect = dialect

    def _column(self, field: Field) -> str:
        definition = self._dialect.column_definition(field)
        if field.after is not None:
            definition += f" AFTER {self._dialect.escape_identifier(field.after)}"
        return definition

    def rename_table(self, name: str) -> str:
        return f"RENAME TO {self._dialect.escape_identifier(name)}"

    def add_field(self, field: Field) -> str:
        return f"ADD COLUMN {self._column(field)}"

    def remove_field(self, name: str) -> str:
        return f"DROP COLUMN {self._dialect.escape_identifier(name)}"

    def change_field(self, old_name: str, new: Field) -> str:
        return f"CHANGE COLUMN {self._dialect.escape_identifier(old_name)} {self._column(new)}"

    def modify_field(self, field: Field) -> str:
        return f"MODIFY COLUMN {self._column(field)}"

    def rename_field(self, old_name: str, new_name: str) -> str:
        escape = self._dialect.escape_identifier
        return f"RENAME COLUMN {escape(old_name)} TO {escape(new_name)}"

    def add_index(self, index: Index) -> str:
        return f"ADD {self._dialect.index_definition(index)}"

    def remove_index(self, name: str) -> str:
        return f"DROP INDEX {self._dialect.escape_identifier(name)}"

    def rename_index(self, old_name: str, new_name: str) -> str:
        escape = self._dialect.escape_identifier
        return f"RENAME INDEX {escape(old_name)} TO {escape(new_name)}"


class MySQLCreateDatabaseBuilder:
    def __init__(self, dialect: MySQLDialect):
        self._dialect = dialect

    def create_options(self, schema: Schema) -> str:
        escape = self._dialect.escape_identifier
        return (
            f"DEFAULT CHARACTER SET={escape(schema.charset.value)} "
            f"DEFAULT COLLATE={escape(schema.collate.value)}"
        )


__all__ = [
    "MySQLDialect",
    "MySQLCreateTableBuilder",
    "MySQLAlterTableBuilder",
    "MySQLCreateDatabaseBuilder",
]
