"""
Protocol definitions for the seams between accessdb and its callers.

The query builder, the lock helper and the migration engine never open a
connection or manage a transaction. They talk to an ``Executor`` that the
caller provides, and the planner compares against a ``Schema`` that a
``SchemaIntrospector`` describes. Both are structural protocols: any object
of the right shape works, no inheritance required.

Manifesto:
    Connection management, transactions, entity hydration and the
    repository layer all live outside this package. Keeping the contract
    down to two methods means:
    - **Testability:** A list-recording fake is a complete Executor
    - **Portability:** sqlite3, mysql-connector or a pool adapter all fit
    - **No lifecycle:** Nothing here opens or closes a connection

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── Executor            execute(sql, params) / query(sql, params)
        └── SchemaIntrospector  describe_actual_schema(table_names)

    Consumers:
        query/locks.py (Lock), migrations/engine.py (MigrationEngine)

    Implementations:
        executor.py (DBAPIExecutor)

Guardrails:
    ❌ DON'T: Pass a raw DB-API connection to the migration engine
    ✅ DO: Wrap it in DBAPIExecutor, which translates placeholders

    ❌ DON'T: Add commit/rollback to the Executor contract
    ✅ DO: Leave transaction lifecycle to the caller

Tags:
    protocol, executor, introspection, contracts, accessdb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from accessdb.schema.model import Schema


@runtime_checkable
class Executor(Protocol):
    """
    Runs rendered SQL against an already-open connection.

    ``sql`` uses the ``:name`` placeholders produced by ``Query.render``;
    ``params`` is the matching value map.

    Examples:
        >>> sql, values = Select("users").where("id = ?", 1).render("sqlite")
        >>> rows = executor.query(sql, values)
    """

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> int:
        """Execute a statement; return the affected row count."""
        ...

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> Iterable[Mapping[str, Any]]:
        """Execute a query; return its rows as mappings."""
        ...


@runtime_checkable
class SchemaIntrospector(Protocol):
    """Describes the live database as a ``Schema`` for the planner."""

    def describe_actual_schema(self, table_names: Sequence[str]) -> Schema:
        ...


__all__ = [
    "Executor",
    "SchemaIntrospector",
]
