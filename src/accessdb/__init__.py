"""accessdb -- Relational query construction, cursor pagination and schema migrations.

Manifesto:
    Building SQL by string concatenation leaks placeholders, drifts between
    engines and breaks on the first nested subquery. Hand-written migration
    scripts drift from the declared schema. ``accessdb`` keeps both as data:
    queries and schemas are objects, and a dialect turns them into exact SQL.

    - **Byte-exact SQL:** The same query renders the same text every time
    - **Two dialects:** MySQL-family and SQLite behind one protocol
    - **Fail loud:** Unsupported DDL raises, failed migrations report precisely

Architecture::

    Layer 1 -- Errors, Logging, Settings
        errors.py          AccessError hierarchy (category, retryable, context)
        logging.py         structlog configuration
        settings.py        AccessSettings (pydantic-settings, ACCESSDB_ prefix)
        protocols.py       Executor / SchemaIntrospector seams

    Layer 2 -- Schema & Dialects
        schema/            Field types, Field, Index, Table, Schema
        dialect.py         Dialect protocol + registry
        dialects/          MySQLDialect, SQLiteDialect and their DDL builders

    Layer 3 -- Queries
        query/             Select, Union, Insert, Update, Delete, locks, DDL
        query/cursor.py    Page, max/min value and current-ids cursors

    Layer 4 -- Migrations & Execution
        migrations/        plan(), Change variants, MigrationEngine, MigrationResult
                           Migration, Migrator (versioned two-phase migrations)
        executor.py        DBAPIExecutor over an open DB-API connection

Examples:
    >>> from accessdb import Select, PageCursor
    >>> query = Select("projects").order_by("id ASC").apply_cursor(PageCursor(3, 20))
    >>> query.get_sql()
    'SELECT `projects`.* FROM `projects` ORDER BY id ASC LIMIT 20 OFFSET 40'
"""

from accessdb.dialect import Dialect, available_dialects, get_dialect, register_dialect
from accessdb.errors import (
    AccessError,
    ConfigError,
    DatabaseError,
    MigrationFailedError,
    MigrationNotInitializedError,
    NotSupportedError,
    PreconditionViolationError,
    QueryCompositionError,
    QueryError,
    SchemaDefinitionError,
    UnionMisuseError,
)
from accessdb.executor import DBAPIExecutor
from accessdb.migrations import (
    Checkpoint,
    Migration,
    MigrationEngine,
    MigrationResult,
    MigrationStatus,
    Migrator,
    VersionOutcome,
    VersionResult,
)
from accessdb.query import (
    AlterTable,
    Column,
    CreateDatabase,
    CreateTable,
    CurrentIdsCursor,
    Delete,
    DropDatabase,
    DropTable,
    Insert,
    Lock,
    LockTables,
    MaxValueCursor,
    MinValueCursor,
    PageCursor,
    Raw,
    RawQuery,
    Select,
    Union,
    UnlockTables,
    Update,
)
from accessdb.schema import Field, Index, Schema, Table, types

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Dialects
    "Dialect",
    "get_dialect",
    "register_dialect",
    "available_dialects",
    # Schema
    "Field",
    "Index",
    "Table",
    "Schema",
    "types",
    # Queries
    "Column",
    "Raw",
    "Select",
    "Union",
    "Insert",
    "Update",
    "Delete",
    "LockTables",
    "UnlockTables",
    "Lock",
    "RawQuery",
    "CreateTable",
    "AlterTable",
    "DropTable",
    "CreateDatabase",
    "DropDatabase",
    # Cursors
    "PageCursor",
    "MaxValueCursor",
    "MinValueCursor",
    "CurrentIdsCursor",
    # Migrations
    "MigrationEngine",
    "MigrationResult",
    "MigrationStatus",
    "Checkpoint",
    "Migration",
    "Migrator",
    "VersionOutcome",
    "VersionResult",
    # Execution
    "DBAPIExecutor",
    # Errors
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
]
