"""Table locks: ``LOCK TABLES`` / ``UNLOCK TABLES`` and the ``Lock`` helper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from accessdb.dialect import Dialect, resolve_dialect
from accessdb.logging import get_logger
from accessdb.protocols import Executor
from accessdb.query.base import table_name_of
from accessdb.query.compiler import Compiler, Query

logger = get_logger(__name__)


class LockType(str, Enum):
    READ = "READ"
    WRITE = "WRITE"


@dataclass(frozen=True)
class TableLock:
    table: str
    alias: str | None
    lock_type: LockType

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.table, self.alias)


class LockTables(Query):
    """Accumulates ``(table, alias, mode)`` entries.

    One entry per table and alias: a write lock replaces a read lock on the
    same pair, never the other way round. Renders ``None`` when empty.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str | None], TableLock] = {}

    @property
    def locks(self) -> list[TableLock]:
        return list(self._locks.values())

    def read(self, table: Any, alias: str | None = None) -> LockTables:
        return self._add(TableLock(table_name_of(table), alias, LockType.READ))

    def write(self, table: Any, alias: str | None = None) -> LockTables:
        return self._add(TableLock(table_name_of(table), alias, LockType.WRITE))

    def merge(self, other: LockTables) -> LockTables:
        """Add every entry of ``other``; returns ``self``."""
        for lock in other.locks:
            self._add(lock)
        return self

    def _add(self, lock: TableLock) -> LockTables:
        existing = self._locks.get(lock.key)
        if existing is None or lock.lock_type is LockType.WRITE:
            self._locks[lock.key] = lock
        return self

    def __bool__(self) -> bool:
        return bool(self._locks)

    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        if not self._locks:
            return None, {}

        compiler = Compiler(dialect, namespace)
        parts = []
        for lock in self._locks.values():
            target = compiler.escape(lock.table)
            if lock.alias is not None:
                target += f" AS {compiler.escape(lock.alias)}"
            parts.append(f"{target} {lock.lock_type.value}")
        return "LOCK TABLES " + ", ".join(parts), {}


class UnlockTables(Query):
    def compile(self, dialect: Dialect, namespace: str) -> tuple[str | None, dict[str, Any]]:
        return "UNLOCK TABLES", {}


class Lock:
    """Lock tables for the duration of a block.

    Example::

        lock = Lock(executor, "mysql")
        lock.read("users", "u")
        lock.write("projects")
        with lock:
            executor.run(Update("projects").values({"name": "x"}))

    On a dialect without table locks (SQLite locks the whole file), ``lock()``
    and ``unlock()`` do nothing.
    """

    def __init__(self, executor: Executor, dialect: Dialect | str | None = None):
        self._executor = executor
        self._dialect = resolve_dialect(dialect)
        self._query = LockTables()
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def read(self, table: Any, alias: str | None = None) -> Lock:
        self._query.read(table, alias)
        return self

    def write(self, table: Any, alias: str | None = None) -> Lock:
        self._query.write(table, alias)
        return self

    def lock(self) -> None:
        sql, values = self._query.render(self._dialect)
        if sql is None:
            return
        if not self._dialect.has_lock_support:
            logger.debug("lock.skipped", dialect=self._dialect.name)
            return

        self._executor.execute(sql, values)
        self._locked = True
        logger.info(
            "lock.acquired",
            tables=[lock.table for lock in self._query.locks],
            dialect=self._dialect.name,
        )

    def unlock(self) -> None:
        if not self._locked:
            return

        sql, values = UnlockTables().render(self._dialect)
        self._executor.execute(sql, values)
        self._locked = False
        logger.info("lock.released", dialect=self._dialect.name)

    def __enter__(self) -> Lock:
        self.lock()
        return self

    def __exit__(self, *args: Any) -> None:
        self.unlock()


__all__ = [
    "LockType",
    "TableLock",
    "LockTables",
    "UnlockTables",
    "Lock",
]
