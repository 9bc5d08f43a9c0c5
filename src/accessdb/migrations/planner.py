"""Schema diff: the ordered list of changes that turns ``actual`` into ``declared``.

Ordering, per table::

    RemoveIndex  RemoveField  RenameField  AddField  ChangeField
    RenameIndex  AddIndex     RenameTable

Removals come before additions, so an index is dropped before the column
it covers and a re-created index is added after its columns exist. New
tables are created first. Tables only present in ``actual`` are never
dropped; virtual fields are ignored.
"""

from __future__ import annotations

from accessdb.migrations.changes import (
    AddField,
    AddIndex,
    Change,
    ChangeField,
    CreateTable,
    RemoveField,
    RemoveIndex,
    RenameField,
    RenameIndex,
    RenameTable,
)
from accessdb.schema.model import Field, Index, Schema, Table


def plan(declared: Schema, actual: Schema) -> list[Change]:
    """Compute the changes needed to migrate ``actual`` to ``declared``."""
    created: list[Change] = []
    altered: list[Change] = []

    for table in declared.tables:
        existing = actual.table(table.name)
        if existing is None and table.renamed_from is not None:
            existing = actual.table(table.renamed_from)

        if existing is None:
            created.append(CreateTable(table))
        else:
            altered.extend(diff_table(existing, table))

    return created + altered


def diff_table(actual: Table, declared: Table) -> list[Change]:
    """Changes for one table; ``actual`` may carry the table's old name."""
    name = actual.name

    actual_fields = {f.name: f for f in actual.stored_columns()}
    declared_fields = {f.name: f for f in declared.stored_columns()}

    # field name in declared -> field name in actual
    matches: dict[str, str] = {}
    renamed_fields: list[RenameField] = []
    for field in declared_fields.values():
        if field.name in actual_fields:
            matches[field.name] = field.name
        elif (
            field.renamed_from is not None
            and field.renamed_from in actual_fields
            and field.renamed_from not in declared_fields
        ):
            matches[field.name] = field.renamed_from
            renamed_fields.append(RenameField(name, field.renamed_from, field.name))

    matched_actual = set(matches.values())
    removed_fields = [
        RemoveField(name, field_name)
        for field_name in actual_fields
        if field_name not in matched_actual
    ]
    added_fields = [
        AddField(name, field)
        for field in declared_fields.values()
        if field.name not in matches
    ]
    changed_fields = []
    for new_name, old_name in matches.items():
        old = actual_fields[old_name].with_changes(name=new_name)
        new = declared_fields[new_name]
        if _field_differs(old, new):
            changed_fields.append(ChangeField(name, old, new))

    removed_indexes, renamed_indexes, added_indexes = _diff_indexes(
        name, actual.indexes, declared.indexes
    )

    changes: list[Change] = [
        *removed_indexes,
        *removed_fields,
        *renamed_fields,
        *added_fields,
        *changed_fields,
        *renamed_indexes,
        *added_indexes,
    ]
    if declared.name != name:
        changes.append(RenameTable(name, declared.name))
    return changes


def _field_differs(old: Field, new: Field) -> bool:
    return (
        old.type != new.type
        or old.nullable != new.nullable
        or old.default != new.default
        or old.primary_key != new.primary_key
        or old.auto_increment != new.auto_increment
    )


def _same_shape(a: Index, b: Index) -> bool:
    return a.fields == b.fields and a.unique == b.unique


def _diff_indexes(
    table: str, actual: tuple[Index, ...], declared: tuple[Index, ...]
) -> tuple[list[RemoveIndex], list[RenameIndex], list[AddIndex]]:
    actual_by_name = {index.name: index for index in actual}
    declared_names = {index.name for index in declared}

    removed: list[RemoveIndex] = []
    renamed: list[RenameIndex] = []
    added: list[AddIndex] = []
    kept: set[str] = set()

    for index in declared:
        existing = actual_by_name.get(index.name)
        if existing is not None:
            kept.add(existing.name)
            if not _same_shape(existing, index):
                removed.append(RemoveIndex(table, existing.name))
                added.append(AddIndex(table, index))
            continue

        source = actual_by_name.get(index.renamed_from) if index.renamed_from else None
        if source is not None and source.name not in declared_names:
            kept.add(source.name)
            if _same_shape(source, index):
                renamed.append(RenameIndex(table, source.name, index.name))
            else:
                removed.append(RemoveIndex(table, source.name))
                added.append(AddIndex(table, index))
            continue

        added.append(AddIndex(table, index))

    gone = [RemoveIndex(table, index.name) for index in actual if index.name not in kept]
    return gone + removed, renamed, added


__all__ = [
    "plan",
    "diff_table",
]
