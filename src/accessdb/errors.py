"""
Structured error types for accessdb.

Every failure raised by the query builder, the dialect drivers and the
migration engine is an ``AccessError``. Instead of bare ``ValueError`` or
``RuntimeError`` instances, these errors carry:

- **Category:** which layer rejected the request (dialect, schema, query...)
- **Retryable:** whether running the same operation again may succeed
- **Context:** the dialect, table, change and SQL involved
- **Cause:** the chained driver exception, when one exists

Manifesto:
    - **Named capability gaps:** "this dialect cannot express that" is a
      different failure from "the database rejected valid DDL"
    - **Fail at the call site:** builders raise immediately, never degrade
    - **Chain, don't replace:** driver exceptions stay reachable as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        AccessError                            │
        │             (category, retryable, context, cause)             │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  NotSupportedError      PreconditionViolationError            │
        │  (DIALECT)              (SCHEMA)                              │
        │       │                                                       │
        │  UnionMisuseError ──┐   SchemaDefinitionError (SCHEMA)        │
        │                     │                                         │
        │  QueryCompositionError (QUERY)                                │
        │                                                               │
        │  MigrationFailedError   DatabaseError      ConfigError        │
        │  (MIGRATION)            (DATABASE)         (CONFIG)           │
        │                              │                                │
        │                         QueryError                            │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> from accessdb.errors import NotSupportedError
    >>> err = NotSupportedError("SQLite does not support changing fields")
    >>> err.with_context(dialect="sqlite", table="users").to_dict()["context"]
    {'dialect': 'sqlite', 'table': 'users'}

Guardrails:
    ❌ DON'T: Turn a dialect gap into an empty SQL fragment
    ✅ DO: Raise NotSupportedError (the two documented soft gaps excepted)

    ❌ DON'T: Lose the driver exception when wrapping
    ✅ DO: Always pass cause= when wrapping exceptions

Tags:
    exception, error-hierarchy, dialect, migration, accessdb

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Layer that produced an error.

    Categories let callers route a failure without ``isinstance`` chains:
    a DIALECT error means the request is not expressible for the target
    engine, while a DATABASE error means the engine itself refused it.
    """

    DIALECT = "DIALECT"           # Construct not expressible in the dialect
    SCHEMA = "SCHEMA"             # Invalid or mismatched schema definition
    QUERY = "QUERY"               # Invalid query builder input
    MIGRATION = "MIGRATION"       # A migration run stopped on a change
    DATABASE = "DATABASE"         # Driver or server rejected a statement
    CONFIG = "CONFIG"             # Settings, unknown dialect names
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        dialect: Name of the dialect in use
        table: Table the failing statement targeted
        change: Human readable description of a migration change
        sql: Rendered SQL, when rendering got that far
        metadata: Additional key-value pairs
    """

    dialect: str | None = None
    table: str | None = None
    change: str | None = None
    sql: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["dialect", "table", "change", "sql"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class AccessError(Exception):
    """
    Base exception for all accessdb errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> AccessError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotSupportedError("No CREATE DATABASE").with_context(
                dialect="sqlite",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DIALECT / SCHEMA ERRORS
# =============================================================================


class NotSupportedError(AccessError):
    """The dialect cannot express the requested construct.

    Raised for ALTER COLUMN on SQLite, CREATE DATABASE on SQLite, and for
    direct field-list mutation on a UNION.
    """

    default_category = ErrorCategory.DIALECT


class PreconditionViolationError(AccessError):
    """A field's declared type does not fit the requested operation."""

    default_category = ErrorCategory.SCHEMA


class SchemaDefinitionError(AccessError):
    """A table or schema definition is inconsistent (duplicate names, ...)."""

    default_category = ErrorCategory.SCHEMA


# =============================================================================
# QUERY ERRORS
# =============================================================================


class QueryCompositionError(AccessError):
    """Builder input that cannot be turned into a query."""

    default_category = ErrorCategory.QUERY


class UnionMisuseError(NotSupportedError, QueryCompositionError):
    """A UNION's own field list was mutated; configure the members instead."""

    default_category = ErrorCategory.QUERY


# =============================================================================
# MIGRATION ERRORS
# =============================================================================


class MigrationFailedError(AccessError):
    """
    A change failed while a migration was being applied.

    Carries the changes that did commit before the failure, so a caller can
    reconcile the partially migrated database by hand. The underlying error
    is available as ``cause`` (and ``__cause__``).
    """

    default_category = ErrorCategory.MIGRATION

    def __init__(
        self,
        message: str,
        *,
        applied: tuple[Any, ...] = (),
        failed_change: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.applied = tuple(applied)
        self.failed_change = failed_change

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["applied"] = [change.describe() for change in self.applied]
        if self.failed_change is not None:
            result["failed_change"] = self.failed_change.describe()
        return result


class MigrationNotInitializedError(AccessError):
    """The table recording applied migration versions could not be created."""

    default_category = ErrorCategory.MIGRATION


# =============================================================================
# DATABASE / CONFIG ERRORS
# =============================================================================


class DatabaseError(AccessError):
    """Database driver error."""

    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """A statement was rejected by the database."""

    pass


class ConfigError(AccessError):
    """Configuration error (unknown dialect, invalid setting)."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, AccessError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, AccessError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.DATABASE
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "AccessError",
    "NotSupportedError",
    "PreconditionViolationError",
    "SchemaDefinitionError",
    "QueryCompositionError",
    "UnionMisuseError",
    "MigrationFailedError",
    "MigrationNotInitializedError",
    "DatabaseError",
    "QueryError",
    "ConfigError",
    "is_retryable",
    "categorize_error",
]
