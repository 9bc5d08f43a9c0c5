"""Schema model.

Tables, fields and indexes as immutable value objects, plus the column
types the dialect drivers translate to DDL.
"""

from accessdb.schema import types
from accessdb.schema.model import (
    CREATED_AT_FIELD,
    DELETED_AT_FIELD,
    NO_DEFAULT,
    UPDATED_AT_FIELD,
    Charset,
    Collate,
    Engine,
    Field,
    Index,
    Schema,
    Table,
    id_field,
)

__all__ = [
    "types",
    "CREATED_AT_FIELD",
    "UPDATED_AT_FIELD",
    "DELETED_AT_FIELD",
    "NO_DEFAULT",
    "Charset",
    "Collate",
    "Engine",
    "Field",
    "Index",
    "Schema",
    "Table",
    "id_field",
]
