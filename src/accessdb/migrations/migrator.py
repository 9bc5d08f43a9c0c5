"""Versioned migration runner.

Tracks the phases of every ``Migration`` version in a migrations table and
refuses calls that would leave the schema in an unknown state.

Architecture:
    ::

        init()                   creates the migrations table if missing
          │
          ▼
        constructive() ──► destructive() ──► revert_destructive()
          ▲   │                                    │
          │   ▼                                    ▼
          └─ revert_constructive() ◄───────────────┘

    Each phase renders its changes through ``MigrationEngine.run`` and, on
    success, stamps ``<phase>_executed_at`` / ``<phase>_reverted_at`` on
    the version's row.

Guardrails:
    ❌ DON'T: Revert a constructive phase while its destructive phase is live
    ✅ DO: ``revert_destructive()`` first; the migrator returns
       ``BLOCKED_BY_DESTRUCTIVE_CHANGE`` otherwise

    ❌ DON'T: Re-run a failed phase from the start
    ✅ DO: Pass ``result.checkpoint`` back to the same phase

Example::

    migrator = Migrator(DBAPIExecutor(conn, "sqlite"), "sqlite")
    migrator.init()
    for migration in (AddUserRole(), DropLegacyFlags()):
        result = migrator.constructive(migration)
        if result.outcome.is_failure:
            result.raise_for_status()
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from accessdb.dialect import Dialect
from accessdb.errors import MigrationNotInitializedError, QueryError
from accessdb.logging import get_logger
from accessdb.migrations.changes import Change
from accessdb.migrations.engine import MigrationEngine
from accessdb.migrations.migration import Migration
from accessdb.migrations.result import (
    Checkpoint,
    MigrationPhase,
    VersionOutcome,
    VersionResult,
)
from accessdb.protocols import Executor
from accessdb.query import CreateTable, Equals, Insert, Select, Update
from accessdb.schema.model import Field, Index, Table
from accessdb.schema.types import DateTime

if TYPE_CHECKING:
    from accessdb.settings import AccessSettings

logger = get_logger(__name__)

MIGRATIONS_TABLE = "accessdb_migration_versions"


def migrations_table(name: str = MIGRATIONS_TABLE) -> Table:
    """Definition of the table recording one row per migration version."""
    return Table(
        name,
        fields=(
            Field("version"),
            Field("constructive_executed_at", DateTime(), None),
            Field("destructive_executed_at", DateTime(), None),
            Field("constructive_reverted_at", DateTime(), None),
            Field("destructive_reverted_at", DateTime(), None),
        ),
        indexes=(Index("version_index", "version", unique=True),),
        created_at=True,
        updated_at=True,
    )


class Migrator:
    """Runs the phases of versioned migrations and records them.

    Parameters
    ----------
    executor
        Runs the rendered statements; must raise ``QueryError`` when the
        database rejects one (``DBAPIExecutor`` does).
    dialect
        Dialect or dialect name used to render everything.
    dry_run
        Render the changes of a phase without executing them or recording
        the phase.
    table
        Name of the migrations table.
    """

    def __init__(
        self,
        executor: Executor,
        dialect: Dialect | str | None = None,
        *,
        dry_run: bool = False,
        table: str = MIGRATIONS_TABLE,
    ) -> None:
        self._executor = executor
        self._engine = MigrationEngine(executor, dialect, dry_run=dry_run)
        self._table = migrations_table(table)

    @classmethod
    def from_settings(
        cls, executor: Executor, settings: AccessSettings | None = None
    ) -> Migrator:
        if settings is None:
            from accessdb.settings import get_settings

            settings = get_settings()
        return cls(executor, settings.get_dialect(), dry_run=settings.dry_run)

    @property
    def dialect(self) -> Dialect:
        return self._engine.dialect

    @property
    def dry_run(self) -> bool:
        return self._engine.dry_run

    @property
    def table(self) -> Table:
        return self._table

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Create the migrations table unless it already exists."""
        if self._table_exists():
            return

        sql, values = CreateTable(self._table).render(self.dialect)
        try:
            self._executor.execute(sql, values)
        except Exception as e:
            raise MigrationNotInitializedError(
                f"Could not create migrations table: {e}", cause=e
            ).with_context(table=self._table.name, dialect=self.dialect.name) from e
        logger.info("migration.table_created", table=self._table.name)

    def records(self) -> list[dict[str, Any]]:
        """Every recorded version, oldest first."""
        return self._query(Select(self._table).order_by("id ASC"))

    def constructive(
        self, migration: Migration, checkpoint: Checkpoint | None = None
    ) -> VersionResult:
        phase = MigrationPhase.CONSTRUCTIVE
        record = self._record(migration)

        if record is not None and record["constructive_executed_at"] is not None:
            return self._refuse(migration, phase, VersionOutcome.ALREADY_EXECUTED)

        return self._apply(
            migration,
            phase,
            migration.constructive,
            checkpoint,
            record,
            constructive_executed_at=self._now(),
            constructive_reverted_at=None,
        )

    def destructive(
        self, migration: Migration, checkpoint: Checkpoint | None = None
    ) -> VersionResult:
        phase = MigrationPhase.DESTRUCTIVE
        record = self._record(migration)

        if record is None or record["constructive_executed_at"] is None:
            return self._refuse(migration, phase, VersionOutcome.CONSTRUCTIVE_NOT_EXECUTED)
        if record["destructive_executed_at"] is not None:
            return self._refuse(migration, phase, VersionOutcome.ALREADY_EXECUTED)

        return self._apply(
            migration,
            phase,
            migration.destructive,
            checkpoint,
            record,
            destructive_executed_at=self._now(),
            destructive_reverted_at=None,
        )

    def revert_constructive(
        self, migration: Migration, checkpoint: Checkpoint | None = None
    ) -> VersionResult:
        phase = MigrationPhase.REVERT_CONSTRUCTIVE
        record = self._record(migration)

        if record is None or record["constructive_executed_at"] is None:
            return self._refuse(migration, phase, VersionOutcome.CONSTRUCTIVE_NOT_EXECUTED)
        if (
            record["destructive_executed_at"] is not None
            and record["destructive_reverted_at"] is None
        ):
            return self._refuse(migration, phase, VersionOutcome.BLOCKED_BY_DESTRUCTIVE_CHANGE)

        return self._apply(
            migration,
            phase,
            migration.revert_constructive,
            checkpoint,
            record,
            constructive_executed_at=None,
            constructive_reverted_at=self._now(),
        )

    def revert_destructive(
        self, migration: Migration, checkpoint: Checkpoint | None = None
    ) -> VersionResult:
        phase = MigrationPhase.REVERT_DESTRUCTIVE
        record = self._record(migration)

        if record is None or record["constructive_executed_at"] is None:
            return self._refuse(migration, phase, VersionOutcome.CONSTRUCTIVE_NOT_EXECUTED)
        if record["destructive_executed_at"] is None:
            return self._refuse(migration, phase, VersionOutcome.DESTRUCTIVE_NOT_EXECUTED)

        return self._apply(
            migration,
            phase,
            migration.revert_destructive,
            checkpoint,
            record,
            destructive_executed_at=None,
            destructive_reverted_at=self._now(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(
        self,
        migration: Migration,
        phase: MigrationPhase,
        changes: Callable[[], Sequence[Change]],
        checkpoint: Checkpoint | None,
        record: dict[str, Any] | None,
        **stamps: Any,
    ) -> VersionResult:
        version = migration.get_version()
        # the caller's checkpoint is never modified
        checkpoint = replace(checkpoint) if checkpoint is not None else Checkpoint()

        run = self._engine.run(changes(), checkpoint)
        if not run.succeeded:
            logger.error(
                "migration.version_failed",
                version=version,
                phase=phase.value,
                step=checkpoint.step,
            )
            return VersionResult(version, phase, VersionOutcome.FAILURE, run, checkpoint)

        if not self.dry_run:
            self._save(version, record, stamps)
        logger.info(
            "migration.version_applied",
            version=version,
            phase=phase.value,
            applied=len(run.applied),
            dry_run=self.dry_run,
        )
        return VersionResult(version, phase, VersionOutcome.SUCCESS, run, checkpoint)

    def _refuse(
        self, migration: Migration, phase: MigrationPhase, outcome: VersionOutcome
    ) -> VersionResult:
        version = migration.get_version()
        logger.warning(
            "migration.version_refused",
            version=version,
            phase=phase.value,
            outcome=outcome.value,
        )
        return VersionResult(version, phase, outcome)

    def _table_exists(self) -> bool:
        try:
            self._query(Select(self._table).limit(1))
        except QueryError:
            return False
        return True

    def _record(self, migration: Migration) -> dict[str, Any] | None:
        query = Select(self._table).where(Equals("version", migration.get_version())).limit(1)
        rows = self._query(query)
        return rows[0] if rows else None

    def _save(self, version: str, record: dict[str, Any] | None, stamps: dict[str, Any]) -> None:
        now = self._now()
        if record is None:
            query = Insert(self._table).values(
                {"version": version, "created_at": now, "updated_at": now, **stamps}
            )
        else:
            query = (
                Update(self._table)
                .values({"updated_at": now, **stamps})
                .where(Equals("id", record["id"]))
            )
        sql, values = query.render(self.dialect)
        self._executor.execute(sql, values)

    def _query(self, query: Select) -> list[dict[str, Any]]:
        sql, values = query.render(self.dialect)
        return [dict(row) for row in self._executor.query(sql, values)]

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)


__all__ = [
    "MIGRATIONS_TABLE",
    "Migrator",
    "migrations_table",
]
