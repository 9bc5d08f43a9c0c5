"""
Schema migrations: diff a declared schema against the live one and apply it.

Architecture:
    ::

        declared Schema ─┐
                         ├─► plan() ─► [Change, ...] ─► MigrationEngine.run()
        actual Schema  ──┘                                   │
                                                             ▼
                                     Executor.execute(DDL) per change, in order
                                                             │
                                                             ▼
                                     MigrationResult (SUCCEEDED | FAILED)

Guardrails:
    ❌ DON'T: Retry a failed run from the start
    ✅ DO: Pass the same Checkpoint to resume after the applied prefix

    ❌ DON'T: Expect tables missing from the declared schema to be dropped
    ✅ DO: Drop tables explicitly with ``accessdb.query.DropTable``

    ❌ DON'T: Hand-edit the migrations table to re-run a phase
    ✅ DO: Call the revert phase through ``Migrator``, then run the phase again

Versioned migrations:
    ``Migration`` subclasses list hand-written changes per phase
    (constructive, destructive and their reverts). ``Migrator`` runs a phase
    through ``MigrationEngine`` and records it in ``accessdb_migration_versions``.
"""

from accessdb.migrations.changes import (
    AddField,
    AddIndex,
    Change,
    ChangeField,
    CreateTable,
    DropTable,
    RemoveField,
    RemoveIndex,
    RenameField,
    RenameIndex,
    RenameTable,
    RunQuery,
)
from accessdb.migrations.engine import MigrationEngine
from accessdb.migrations.migration import Migration
from accessdb.migrations.migrator import MIGRATIONS_TABLE, Migrator, migrations_table
from accessdb.migrations.planner import diff_table, plan
from accessdb.migrations.result import (
    Checkpoint,
    MigrationPhase,
    MigrationResult,
    MigrationStatus,
    VersionOutcome,
    VersionResult,
)

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
    "plan",
    "diff_table",
    "MigrationEngine",
    "MigrationResult",
    "MigrationStatus",
    "Checkpoint",
    "Migration",
    "Migrator",
    "MigrationPhase",
    "VersionOutcome",
    "VersionResult",
    "MIGRATIONS_TABLE",
    "migrations_table",
]
