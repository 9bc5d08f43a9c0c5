"""DDL queries: CREATE/ALTER/DROP TABLE and CREATE/DROP DATABASE.

These queries carry no bound values. All dialect differences come from the
dialect's builders, so an ALTER that SQLite cannot express raises
``NotSupportedError`` when the query is rendered, not when it is built.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from accessdb.dialect import AlterTableBuilder, Dialect
from accessdb.query.compiler import Query
from accessdb.schema import types
from accessdb.schema.model import Field, Index, Schema, Table


def _name(value: Any) -> str:
    return getattr(value, "name", value)


class CreateTable(Query):
    """``CREATE TABLE`` for a schema ``Table``.

    Columns come first, then the primary and foreign keys, then the indexes.
    Virtual fields are skipped and so are parts a dialect renders empty.
    """

    def __init__(self, table: Table):
        self.table = table

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        builder = dialect.create_table_builder()
        fields = self.table.stored_columns()

        parts = [dialect.column_definition(field) for field in fields]
        for field in fields:
            if field.primary_key:
                parts.append(builder.primary_key(field))
            if isinstance(field.type, types.Reference):
                parts.append(builder.foreign_key(field))
        parts.extend(builder.index(index) for index in self.table.indexes)
        parts = [part for part in parts if part]

        body = ",\n    ".join(parts)
        sql = f"CREATE TABLE {dialect.escape_identifier(self.table.name)} (\n    {body}\n)"

        options = builder.table_options(self.table)
        if options:
            sql += f" {options}"
        return sql, {}


class AlterTable(Query):
    """Records alterations of one table; renders ``None`` when there are none.

    Example::

        alter = AlterTable(users)
        alter.add_field(Field("role", VarChar(30), nullable=True))
        alter.rename_field("name", "first_name")
        alter.get_sql("mysql")
        # ALTER TABLE `users` ADD COLUMN `role` VARCHAR(30) NULL,
        #   RENAME COLUMN `name` TO `first_name`
    """

    def __init__(self, table: Table | str):
        self.table_name = _name(table)
        self._alterations: list[Callable[[AlterTableBuilder], str]] = []

    def __len__(self) -> int:
        return len(self._alterations)

    def rename_table(self, name: Table | str) -> AlterTable:
        new_name = _name(name)
        self._alterations.append(lambda b: b.rename_table(new_name))
        return self

    def add_field(self, field: Field) -> AlterTable:
        self._alterations.append(lambda b: b.add_field(field))
        return self

    def remove_field(self, name: Field | str) -> AlterTable:
        field_name = _name(name)
        self._alterations.append(lambda b: b.remove_field(field_name))
        return self

    def change_field(self, old_name: Field | str, new: Field) -> AlterTable:
        from_name = _name(old_name)
        self._alterations.append(lambda b: b.change_field(from_name, new))
        return self

    def modify_field(self, field: Field) -> AlterTable:
        self._alterations.append(lambda b: b.modify_field(field))
        return self

    def rename_field(self, old_name: Field | str, new_name: Field | str) -> AlterTable:
        from_name, to_name = _name(old_name), _name(new_name)
        self._alterations.append(lambda b: b.rename_field(from_name, to_name))
        return self

    def add_index(self, index: Index) -> AlterTable:
        self._alterations.append(lambda b: b.add_index(index))
        return self

    def remove_index(self, name: Index | str) -> AlterTable:
        index_name = _name(name)
        self._alterations.append(lambda b: b.remove_index(index_name))
        return self

    def rename_index(self, old_name: Index | str, new_name: Index | str) -> AlterTable:
        from_name, to_name = _name(old_name), _name(new_name)
        self._alterations.append(lambda b: b.rename_index(from_name, to_name))
        return self

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        if not self._alterations:
            return None, {}

        builder = dialect.alter_table_builder()
        parts = [alteration(builder) for alteration in self._alterations]
        sql = f"ALTER TABLE {dialect.escape_identifier(self.table_name)} " + ", ".join(parts)
        return sql, {}


class DropTable(Query):
    def __init__(self, table: Table | str, if_exists: bool = False):
        self.table_name = _name(table)
        self.if_exists = if_exists

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        check = " IF EXISTS" if self.if_exists else ""
        return f"DROP TABLE{check} {dialect.escape_identifier(self.table_name)}", {}


class CreateDatabase(Query):
    """``CREATE DATABASE`` with the schema's charset and collation."""

    def __init__(self, schema: Schema, if_not_exists: bool = False):
        self.schema = schema
        self.if_not_exists = if_not_exists

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        options = dialect.create_database_builder().create_options(self.schema)
        check = " IF NOT EXISTS" if self.if_not_exists else ""
        sql = f"CREATE DATABASE{check} {dialect.escape_identifier(self.schema.name)}"
        if options:
            sql += f" {options}"
        return sql, {}


class DropDatabase(Query):
    def __init__(self, schema: Schema | str, if_exists: bool = False):
        self.schema_name = _name(schema)
        self.if_exists = if_exists

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        check = " IF EXISTS" if self.if_exists else ""
        return f"DROP DATABASE{check} {dialect.escape_identifier(self.schema_name)}", {}


__all__ = [
    "CreateTable",
    "AlterTable",
    "DropTable",
    "CreateDatabase",
    "DropDatabase",
]
