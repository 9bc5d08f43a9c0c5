"""Migration engine: plan a schema diff and apply it change by change.

Changes are applied strictly in order and the run stops at the first
failure. Nothing is rolled back (DDL is rarely transactional) and nothing
is retried; the ``MigrationResult`` says exactly which changes were
executed, which one failed and which were never attempted.

Example::

    engine = MigrationEngine(DBAPIExecutor(conn, "sqlite"), "sqlite")
    changes = engine.plan(declared, introspector.describe_actual_schema(names))
    result = engine.run(changes)
    if not result.succeeded:
        log.error("migration failed", **result.to_dict())
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from accessdb.dialect import Dialect, resolve_dialect
from accessdb.errors import MigrationFailedError
from accessdb.logging import get_logger
from accessdb.migrations.changes import Change
from accessdb.migrations.planner import plan as plan_changes
from accessdb.migrations.result import Checkpoint, MigrationResult
from accessdb.protocols import Executor
from accessdb.schema.model import Schema

if TYPE_CHECKING:
    from accessdb.settings import AccessSettings

logger = get_logger(__name__)


class MigrationEngine:
    """Applies schema changes through an ``Executor``.

    Parameters
    ----------
    executor
        Runs the rendered DDL (see ``accessdb.executor.DBAPIExecutor``).
    dialect
        Dialect or dialect name used to render the changes.
    dry_run
        Render every change but execute none of them.
    """

    def __init__(
        self,
        executor: Executor,
        dialect: Dialect | str | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self._executor = executor
        self._dialect = resolve_dialect(dialect)
        self._dry_run = dry_run

    @classmethod
    def from_settings(
        cls, executor: Executor, settings: AccessSettings | None = None
    ) -> MigrationEngine:
        if settings is None:
            from accessdb.settings import get_settings

            settings = get_settings()
        return cls(executor, settings.get_dialect(), dry_run=settings.dry_run)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def plan(declared: Schema, actual: Schema) -> list[Change]:
        """Ordered changes that migrate ``actual`` to ``declared``."""
        changes = plan_changes(declared, actual)
        logger.info("migration.planned", schema=declared.name, count=len(changes))
        return changes

    def statements(self, changes: Iterable[Change]) -> list[str]:
        """Render the DDL for ``changes`` without executing anything."""
        statements = []
        for change in changes:
            sql, _ = change.to_query().render(self._dialect)
            if sql is not None:
                statements.append(sql)
        return statements

    def run(
        self, changes: Iterable[Change], checkpoint: Checkpoint | None = None
    ) -> MigrationResult:
        """Apply ``changes`` in order, stopping at the first failure."""
        changes = list(changes)
        checkpoint = checkpoint if checkpoint is not None else Checkpoint()

        applied: list[Change] = []
        skipped: list[Change] = []

        for step, change in enumerate(changes):
            if checkpoint.should_skip(step):
                skipped.append(change)
                logger.info("migration.change_skipped", change=change.describe(), step=step)
                continue

            sql: str | None = None
            try:
                sql, values = change.to_query().render(self._dialect)
                if sql is not None and not self._dry_run:
                    self._executor.execute(sql, values)
            except Exception as e:
                error = self._failure(change, applied, sql, e)
                logger.error(
                    "migration.change_failed",
                    change=change.describe(),
                    table=change.table,
                    step=step,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return MigrationResult.failure(
                    applied, skipped, change, changes[step + 1:], error
                )

            applied.append(change)
            if not self._dry_run:
                checkpoint.advance()
            logger.info(
                "migration.change_applied",
                change=change.describe(),
                table=change.table,
                step=step,
                dry_run=self._dry_run,
            )

        logger.info(
            "migration.completed",
            applied=len(applied),
            skipped=len(skipped),
            dry_run=self._dry_run,
        )
        return MigrationResult.success(applied, skipped)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _failure(
        self, change: Change, applied: list[Change], sql: str | None, cause: Exception
    ) -> MigrationFailedError:
        context: dict[str, Any] = {
            "dialect": self._dialect.name,
            "table": change.table,
            "change": change.describe(),
        }
        if sql is not None:
            context["sql"] = sql
        error = MigrationFailedError(
            f"Migration failed at '{change.describe()}' after "
            f"{len(applied)} applied change(s): {cause}",
            applied=tuple(applied),
            failed_change=change,
            cause=cause,
        )
        error.with_context(**context)
        return error


__all__ = ["MigrationEngine"]
