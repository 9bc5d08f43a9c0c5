"""Tests for the schema diff planner and the change variants."""

from __future__ import annotations

from accessdb.migrations import (
    AddField,
    AddIndex,
    ChangeField,
    CreateTable,
    RemoveField,
    RemoveIndex,
    RenameField,
    RenameIndex,
    RenameTable,
    diff_table,
    plan,
)
from accessdb.schema import Field, Index, Schema, Table, types


def users(*fields: Field, indexes: tuple[Index, ...] = (), **kwargs) -> Table:
    return Table("users", fields=fields, indexes=indexes, **kwargs)


# =========================================================================
# Table level
# =========================================================================


class TestPlan:
    def test_identical_schemas(self, app_schema: Schema) -> None:
        assert plan(app_schema, app_schema) == []

    def test_new_tables_created_first(self, users_table: Table, projects_table: Table) -> None:
        actual = Schema("app", tables=(Table("users", fields=(Field("name", types.VarChar(50), "Dave"),)),))
        declared = Schema("app", tables=(users_table, projects_table))
        changes = plan(declared, actual)
        assert changes[0] == CreateTable(projects_table)
        assert all(not isinstance(c, CreateTable) for c in changes[1:])

    def test_tables_never_dropped(self, app_schema: Schema) -> None:
        declared = Schema("app", tables=(app_schema.table("users"),))
        assert plan(declared, app_schema) == []

    def test_renamed_table(self, users_table: Table) -> None:
        actual = Schema("app", tables=(Table("people", fields=users_table.fields, created_at=True,
                                             updated_at=True, deleted_at=True),))
        declared = Schema(
            "app",
            tables=(Table("users", fields=users_table.fields, created_at=True, updated_at=True,
                          deleted_at=True, renamed_from="people"),),
        )
        assert plan(declared, actual) == [RenameTable("people", "users")]

    def test_renamed_table_changes_use_old_name(self) -> None:
        actual = Schema("app", tables=(Table("people"),))
        declared = Schema("app", tables=(Table("users", fields=(Field("bio", types.Text(), None),),
                                               renamed_from="people"),))
        assert plan(declared, actual) == [
            AddField("people", Field("bio", types.Text(), None)),
            RenameTable("people", "users"),
        ]


# =========================================================================
# Fields
# =========================================================================


class TestFields:
    def test_add_and_remove(self) -> None:
        actual = users(Field("name"), Field("legacy", types.Integer()))
        declared = users(Field("name"), Field("role", types.VarChar(30), nullable=True))
        assert diff_table(actual, declared) == [
            RemoveField("users", "legacy"),
            AddField("users", Field("role", types.VarChar(30), nullable=True)),
        ]

    def test_change_detected(self) -> None:
        old = Field("name", types.VarChar(50))
        new = Field("name", types.VarChar(80))
        assert diff_table(users(old), users(new)) == [ChangeField("users", old, new)]

    def test_nullable_and_default_changes(self) -> None:
        base = Field("name", types.VarChar(50))
        assert diff_table(users(base), users(base.with_changes(nullable=True))) != []
        assert diff_table(users(base), users(base.with_changes(default="x"))) != []

    def test_builtin_datetime_fields(self) -> None:
        changes = diff_table(users(), users(deleted_at=True))
        assert changes == [AddField("users", Field("deleted_at", types.DateTime(), None))]

    def test_renamed_field(self) -> None:
        actual = users(Field("name", types.VarChar(50)))
        declared = users(Field("full_name", types.VarChar(50), renamed_from="name"))
        assert diff_table(actual, declared) == [RenameField("users", "name", "full_name")]

    def test_renamed_and_changed(self) -> None:
        actual = users(Field("name", types.VarChar(50)))
        renamed = Field("full_name", types.VarChar(100), renamed_from="name")
        changes = diff_table(actual, users(renamed))
        assert changes == [
            RenameField("users", "name", "full_name"),
            ChangeField("users", Field("full_name", types.VarChar(50)), renamed),
        ]

    def test_rename_ignored_when_source_still_declared(self) -> None:
        actual = users(Field("name"))
        declared = users(Field("name"), Field("alias", renamed_from="name"))
        assert diff_table(actual, declared) == [AddField("users", Field("alias"))]

    def test_virtual_fields_ignored(self) -> None:
        declared = users(Field("score", types.Float(), virtual=True))
        assert diff_table(users(), declared) == []


# =========================================================================
# Indexes
# =========================================================================


class TestIndexes:
    def test_remove_index_before_add_field(self) -> None:
        actual = users(Field("name"), indexes=(Index("name_index", "name"),))
        declared = users(Field("name"), Field("role", nullable=True))
        assert diff_table(actual, declared) == [
            RemoveIndex("users", "name_index"),
            AddField("users", Field("role", nullable=True)),
        ]

    def test_add_index_after_its_field(self) -> None:
        declared = users(Field("role"), indexes=(Index("role_index", "role"),))
        assert diff_table(users(), declared) == [
            AddField("users", Field("role")),
            AddIndex("users", Index("role_index", "role")),
        ]

    def test_changed_shape_recreated(self) -> None:
        actual = users(Field("a"), Field("b"), indexes=(Index("i", "a"),))
        declared = users(Field("a"), Field("b"), indexes=(Index("i", ("a", "b")),))
        assert diff_table(actual, declared) == [
            RemoveIndex("users", "i"),
            AddIndex("users", Index("i", ("a", "b"))),
        ]

    def test_unique_flag_is_shape(self) -> None:
        actual = users(Field("a"), indexes=(Index("i", "a"),))
        declared = users(Field("a"), indexes=(Index("i", "a", unique=True),))
        assert [type(c) for c in diff_table(actual, declared)] == [RemoveIndex, AddIndex]

    def test_renamed_index(self) -> None:
        actual = users(Field("a"), indexes=(Index("old", "a"),))
        declared = users(Field("a"), indexes=(Index("new", "a", renamed_from="old"),))
        assert diff_table(actual, declared) == [RenameIndex("users", "old", "new")]

    def test_renamed_index_with_new_shape(self) -> None:
        actual = users(Field("a"), Field("b"), indexes=(Index("old", "a"),))
        declared = users(
            Field("a"), Field("b"), indexes=(Index("new", ("a", "b"), renamed_from="old"),)
        )
        assert diff_table(actual, declared) == [
            RemoveIndex("users", "old"),
            AddIndex("users", Index("new", ("a", "b"))),
        ]


# =========================================================================
# Ordering
# =========================================================================


class TestOrdering:
    def test_full_order(self) -> None:
        actual = Table(
            "people",
            fields=(Field("name", types.VarChar(50)), Field("legacy"), Field("nick")),
            indexes=(Index("legacy_index", "legacy"), Index("name_index", "name")),
        )
        declared = Table(
            "users",
            fields=(
                Field("name", types.VarChar(80)),
                Field("handle", renamed_from="nick"),
                Field("role", nullable=True),
            ),
            indexes=(
                Index("name_idx", "name", renamed_from="name_index"),
                Index("role_index", "role"),
            ),
            renamed_from="people",
        )
        kinds = [c.kind for c in diff_table(actual, declared)]
        assert kinds == [
            "RemoveIndex",
            "RemoveField",
            "RenameField",
            "AddField",
            "ChangeField",
            "RenameIndex",
            "AddIndex",
            "RenameTable",
        ]


# =========================================================================
# Change variants
# =========================================================================


class TestChanges:
    def test_describe(self, users_table: Table) -> None:
        assert CreateTable(users_table).describe() == "CreateTable users"
        assert AddField("users", Field("role")).describe() == "AddField users.role"
        assert RemoveIndex("users", "x").describe() == "RemoveIndex users.x"
        assert RenameField("t", "a", "b").describe() == "RenameField t.a -> b"
        assert RenameTable("people", "users").describe() == "RenameTable people -> users"

    def test_table_property(self, users_table: Table) -> None:
        assert CreateTable(users_table).table == "users"
        assert RemoveField("users", "role").table == "users"

    def test_to_query(self) -> None:
        change = AddField("users", Field("role", types.VarChar(30), nullable=True))
        assert change.to_query().get_sql("mysql") == (
            "ALTER TABLE `users` ADD COLUMN `role` VARCHAR(30) NULL"
        )
        assert RenameIndex("users", "a", "b").to_query().get_sql("mysql") == (
            "ALTER TABLE `users` RENAME INDEX `a` TO `b`"
        )
        old = Field("name", types.VarChar(50))
        assert ChangeField("users", old, old.with_changes(type=types.Text())).to_query().get_sql(
            "mysql"
        ) == "ALTER TABLE `users` CHANGE COLUMN `name` `name` TEXT NOT NULL"
