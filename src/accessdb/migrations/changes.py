"""Schema changes: one frozen dataclass per kind of change.

Each variant carries only what it needs and renders itself into a DDL query
with ``to_query()``. The query is rendered (and may raise
``NotSupportedError``) only when the engine applies the change.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from accessdb.query import ddl
from accessdb.query.compiler import Query
from accessdb.schema.model import Field, Index, Table


class Change(ABC):
    """A single schema modification against one table."""

    table: str

    @abstractmethod
    def to_query(self) -> Query:
        ...

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable form used in logs and error reports."""

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class CreateTable(Change):
    definition: Table

    @property
    def table(self) -> str:  # type: ignore[override]
        return self.definition.name

    def to_query(self) -> Query:
        return ddl.CreateTable(self.definition)

    def describe(self) -> str:
        return f"CreateTable {self.table}"


@dataclass(frozen=True)
class AddField(Change):
    table: str
    field: Field

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).add_field(self.field)

    def describe(self) -> str:
        return f"AddField {self.table}.{self.field.name}"


@dataclass(frozen=True)
class RemoveField(Change):
    table: str
    name: str

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).remove_field(self.name)

    def describe(self) -> str:
        return f"RemoveField {self.table}.{self.name}"


@dataclass(frozen=True)
class ChangeField(Change):
    table: str
    old: Field
    new: Field

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).change_field(self.old.name, self.new)

    def describe(self) -> str:
        return f"ChangeField {self.table}.{self.old.name}"


@dataclass(frozen=True)
class RenameField(Change):
    table: str
    old_name: str
    new_name: str

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).rename_field(self.old_name, self.new_name)

    def describe(self) -> str:
        return f"RenameField {self.table}.{self.old_name} -> {self.new_name}"


@dataclass(frozen=True)
class AddIndex(Change):
    table: str
    index: Index

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).add_index(self.index)

    def describe(self) -> str:
        return f"AddIndex {self.table}.{self.index.name}"


@dataclass(frozen=True)
class RemoveIndex(Change):
    table: str
    name: str

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).remove_index(self.name)

    def describe(self) -> str:
        return f"RemoveIndex {self.table}.{self.name}"


@dataclass(frozen=True)
class RenameIndex(Change):
    table: str
    old_name: str
    new_name: str

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).rename_index(self.old_name, self.new_name)

    def describe(self) -> str:
        return f"RenameIndex {self.table}.{self.old_name} -> {self.new_name}"


@dataclass(frozen=True)
class RenameTable(Change):
    table: str
    new_name: str

    def to_query(self) -> Query:
        return ddl.AlterTable(self.table).rename_table(self.new_name)

    def describe(self) -> str:
        return f"RenameTable {self.table} -> {self.new_name}"


@dataclass(frozen=True)
class DropTable(Change):
    """Never produced by the planner; written by hand in a versioned migration."""

    table: str
    if_exists: bool = False

    def to_query(self) -> Query:
        return ddl.DropTable(self.table, if_exists=self.if_exists)

    def describe(self) -> str:
        return f"DropTable {self.table}"


@dataclass(frozen=True)
class RunQuery(Change):
    """An arbitrary query run as a migration step, e.g. a data backfill."""

    query: Query
    table: str = ""

    def to_query(self) -> Query:
        return self.query

    def describe(self) -> str:
        return f"RunQuery {self.table or type(self.query).__name__}"


__all__ = [
    "Change",
    "CreateTable",
    "AddField",
    "RemoveField",
    "ChangeField",
    "RenameField",
    "AddIndex",
    "RemoveIndex",
    "RenameIndex",
    "RenameTable",
    "DropTable",
    "RunQuery",
]
