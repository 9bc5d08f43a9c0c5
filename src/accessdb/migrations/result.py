"""Migration outcomes and resume point."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from accessdb.errors import MigrationFailedError
from accessdb.migrations.changes import Change


class MigrationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Checkpoint:
    """Number of leading changes already applied.

    The engine skips that many changes and advances the checkpoint after
    each one it applies, so the same checkpoint can be passed to a later run
    of the same change list to resume after a failure.
    """

    step: int = 0

    def should_skip(self, step: int) -> bool:
        return step < self.step

    def advance(self) -> None:
        self.step += 1


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of one ``MigrationEngine.run``.

    On failure, ``applied`` lists exactly the changes that were executed
    before ``failed_change``; ``pending`` lists the ones never attempted.
    """

    status: MigrationStatus
    applied: tuple[Change, ...] = ()
    skipped: tuple[Change, ...] = ()
    failed_change: Change | None = None
    pending: tuple[Change, ...] = ()
    error: MigrationFailedError | None = None

    @classmethod
    def success(cls, applied: list[Change], skipped: list[Change]) -> MigrationResult:
        return cls(MigrationStatus.SUCCEEDED, tuple(applied), tuple(skipped))

    @classmethod
    def failure(
        cls,
        applied: list[Change],
        skipped: list[Change],
        failed_change: Change,
        pending: list[Change],
        error: MigrationFailedError,
    ) -> MigrationResult:
        return cls(
            MigrationStatus.FAILED,
            tuple(applied),
            tuple(skipped),
            failed_change,
            tuple(pending),
            error,
        )

    @property
    def succeeded(self) -> bool:
        return self.status is MigrationStatus.SUCCEEDED

    def raise_for_status(self) -> None:
        """Raise the wrapped ``MigrationFailedError`` if the run failed."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status.value,
            "applied": [change.describe() for change in self.applied],
            "skipped": [change.describe() for change in self.skipped],
            "pending": [change.describe() for change in self.pending],
        }
        if self.failed_change is not None:
            result["failed_change"] = self.failed_change.describe()
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


# =============================================================================
# VERSIONED MIGRATIONS
# =============================================================================


class MigrationPhase(str, Enum):
    CONSTRUCTIVE = "constructive"
    DESTRUCTIVE = "destructive"
    REVERT_CONSTRUCTIVE = "revert_constructive"
    REVERT_DESTRUCTIVE = "revert_destructive"


class VersionOutcome(str, Enum):
    """What happened to one phase of one migration version.

    Only ``SUCCESS`` and ``FAILURE`` ran anything. ``ALREADY_EXECUTED`` is a
    warning; the other refusals are errors in the order phases were called.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    CONSTRUCTIVE_NOT_EXECUTED = "constructive_not_executed"
    BLOCKED_BY_DESTRUCTIVE_CHANGE = "blocked_by_destructive_change"
    DESTRUCTIVE_NOT_EXECUTED = "destructive_not_executed"
    ALREADY_EXECUTED = "already_executed"

    @property
    def is_success(self) -> bool:
        return self is VersionOutcome.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self is VersionOutcome.FAILURE

    @property
    def is_warning(self) -> bool:
        return self is VersionOutcome.ALREADY_EXECUTED

    @property
    def is_error(self) -> bool:
        return self in (
            VersionOutcome.CONSTRUCTIVE_NOT_EXECUTED,
            VersionOutcome.BLOCKED_BY_DESTRUCTIVE_CHANGE,
            VersionOutcome.DESTRUCTIVE_NOT_EXECUTED,
        )

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self]


_OUTCOME_MESSAGES = {
    VersionOutcome.SUCCESS: "Migration executed successfully",
    VersionOutcome.FAILURE: "Migration execution failed",
    VersionOutcome.CONSTRUCTIVE_NOT_EXECUTED: "Constructive migration was not executed",
    VersionOutcome.BLOCKED_BY_DESTRUCTIVE_CHANGE: "Blocked by destructive change",
    VersionOutcome.DESTRUCTIVE_NOT_EXECUTED: "Destructive migration was not executed",
    VersionOutcome.ALREADY_EXECUTED: "Migration has already been executed",
}


@dataclass(frozen=True)
class VersionResult:
    """Outcome of one phase of one migration version.

    ``run`` is set when changes were rendered (success, dry run or failure).
    On failure ``checkpoint`` has advanced past the applied changes; pass it
    back to the same phase to resume.
    """

    version: str
    phase: MigrationPhase
    outcome: VersionOutcome
    run: MigrationResult | None = None
    checkpoint: Checkpoint | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome.is_success

    @property
    def message(self) -> str:
        return self.outcome.message

    def raise_for_status(self) -> None:
        """Raise the ``MigrationFailedError`` of a failed run, if any."""
        if self.run is not None:
            self.run.raise_for_status()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "version": self.version,
            "phase": self.phase.value,
            "outcome": self.outcome.value,
            "message": self.message,
        }
        if self.run is not None:
            result["run"] = self.run.to_dict()
        return result


__all__ = [
    "MigrationStatus",
    "MigrationResult",
    "Checkpoint",
    "MigrationPhase",
    "VersionOutcome",
    "VersionResult",
]
