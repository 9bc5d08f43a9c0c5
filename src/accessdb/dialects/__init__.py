"""Concrete dialect drivers."""

from accessdb.dialects.base import BaseDialect
from accessdb.dialects.mysql import MySQLDialect
from accessdb.dialects.sqlite import SQLiteDialect

__all__ = [
    "BaseDialect",
    "MySQLDialect",
    "SQLiteDialect",
]
