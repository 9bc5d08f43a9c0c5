"""
Query model: composable SQL queries rendered per dialect.

Every query renders to ``(sql, values)`` in one pass. Placeholders are
``:name`` markers whose names encode where in the statement they live, so
nested subqueries and union members never collide.

Architecture:
    ::

        compiler.py   Query, Compiler, Column, value conversion
        clauses.py    conditions (Raw, Equals, In, ...) and ORDER BY clauses
        base.py       TableQuery: joins, WHERE, HAVING, ORDER BY, LIMIT, cursor slot
        select.py     Select, Union
        dml.py        Insert, Update, Delete
        locks.py      LockTables, UnlockTables, Lock
        ddl.py        CreateTable, AlterTable, DropTable, CreateDatabase, DropDatabase
        raw.py        RawQuery
        cursor.py     PageCursor, MaxValueCursor, MinValueCursor, CurrentIdsCursor

Examples:
    >>> from accessdb.query import Select
    >>> Select("projects", "p").where("p.status = ?", "ACTIVE").render("sqlite")
    ('SELECT "p".* FROM "projects" AS "p" WHERE (p.status = :w0)', {'w0': 'ACTIVE'})
"""

from accessdb.query.base import TableQuery
from accessdb.query.clauses import (
    Ascending,
    Clause,
    Condition,
    Descending,
    Equals,
    GreaterThan,
    GreaterThanOrEquals,
    In,
    IsNotNull,
    IsNull,
    LessThan,
    LessThanOrEquals,
    Multiple,
    MultipleOr,
    NotEquals,
    NotIn,
    OrderBy,
    Random,
    Raw,
    Relation,
    Verbatim,
)
from accessdb.query.compiler import Column, Query, to_database_format
from accessdb.query.cursor import (
    DEFAULT_PAGE_SIZE,
    CurrentIdsCursor,
    Cursor,
    MaxValueCursor,
    MinValueCursor,
    OffsetCursor,
    PageCursor,
)
from accessdb.query.ddl import AlterTable, CreateDatabase, CreateTable, DropDatabase, DropTable
from accessdb.query.dml import Delete, Insert, Update
from accessdb.query.locks import Lock, LockTables, LockType, UnlockTables
from accessdb.query.raw import RawQuery
from accessdb.query.select import Select, Union

__all__ = [
    # Base
    "Query",
    "TableQuery",
    "Column",
    "to_database_format",
    # Conditions
    "Clause",
    "Condition",
    "Raw",
    "Equals",
    "NotEquals",
    "GreaterThan",
    "GreaterThanOrEquals",
    "LessThan",
    "LessThanOrEquals",
    "In",
    "NotIn",
    "IsNull",
    "IsNotNull",
    "Relation",
    "Multiple",
    "MultipleOr",
    # Order by
    "OrderBy",
    "Ascending",
    "Descending",
    "Random",
    "Verbatim",
    # Queries
    "Select",
    "Union",
    "Insert",
    "Update",
    "Delete",
    "LockTables",
    "UnlockTables",
    "LockType",
    "Lock",
    "RawQuery",
    "CreateTable",
    "AlterTable",
    "DropTable",
    "CreateDatabase",
    "DropDatabase",
    # Cursors
    "DEFAULT_PAGE_SIZE",
    "Cursor",
    "PageCursor",
    "OffsetCursor",
    "MaxValueCursor",
    "MinValueCursor",
    "CurrentIdsCursor",
]
