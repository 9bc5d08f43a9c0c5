"""
Shared pytest fixtures for accessdb tests.

This module provides:
- Declared table/schema definitions used across query, DDL and migration tests
- Dialect fixtures (parametrised and per-engine)
- In-memory sqlite3 connection and executor
- Isolation of settings and structlog configuration between tests
"""

import sqlite3
import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure accessdb package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accessdb.dialect import Dialect, get_dialect
from accessdb.dialects import MySQLDialect, SQLiteDialect
from accessdb.executor import DBAPIExecutor
from accessdb.schema import Field, Index, Schema, Table, types
from accessdb.settings import reset_settings


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings_and_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh settings and default structlog config for every test."""
    for name in ("ACCESSDB_DIALECT", "ACCESSDB_PAGE_SIZE", "ACCESSDB_DRY_RUN", "ACCESSDB_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
    structlog.reset_defaults()


# =============================================================================
# Dialects
# =============================================================================


@pytest.fixture(params=["mysql", "sqlite"])
def dialect(request: pytest.FixtureRequest) -> Dialect:
    """Parametric fixture: run each test against both dialects."""
    return get_dialect(request.param)


@pytest.fixture
def mysql() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture
def sqlite() -> SQLiteDialect:
    return SQLiteDialect()


# =============================================================================
# Schema definitions
# =============================================================================


@pytest.fixture
def users_table() -> Table:
    return Table(
        "users",
        fields=(
            Field("name", types.VarChar(50), "Dave"),
            Field("role", types.VarChar(30), nullable=True),
            Field("status", types.EnumType(("ACTIVE", "BANNED"))),
        ),
        created_at=True,
        updated_at=True,
        deleted_at=True,
    )


@pytest.fixture
def projects_table() -> Table:
    return Table(
        "projects",
        fields=(
            Field("owner_id", types.Reference("users")),
            Field("name", types.VarChar(50)),
        ),
        indexes=(Index("owner_id_index", "owner_id"),),
    )


@pytest.fixture
def app_schema(users_table: Table, projects_table: Table) -> Schema:
    return Schema("app", tables=(users_table, projects_table))


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite connection."""
    c = sqlite3.connect(":memory:")
    yield c
    c.close()


@pytest.fixture
def executor(conn: sqlite3.Connection) -> DBAPIExecutor:
    return DBAPIExecutor(conn, "sqlite")


class RecordingExecutor:
    """Executor that records statements instead of running them."""

    def __init__(self, fail_on: str | None = None):
        self.statements: list[tuple[str, dict]] = []
        self.fail_on = fail_on

    def execute(self, sql: str, params=None) -> int:
        if self.fail_on is not None and self.fail_on in sql:
            raise RuntimeError(f"rejected: {sql}")
        self.statements.append((sql, dict(params or {})))
        return 0

    def query(self, sql: str, params=None) -> list:
        self.statements.append((sql, dict(params or {})))
        return []

    @property
    def sql(self) -> list[str]:
        return [sql for sql, _ in self.statements]


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()
