"""Column types understood by the dialect drivers.

Each type is an immutable value object; dialects map them to DDL in
``Dialect.type_definition``. Two fields with equal types compare equal, which
is what the migration planner relies on to detect column changes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldType:
    """Base class of all column types."""

    @property
    def type_name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Boolean(FieldType):
    pass


@dataclass(frozen=True)
class Date(FieldType):
    pass


@dataclass(frozen=True)
class DateTime(FieldType):
    pass


@dataclass(frozen=True)
class Integer(FieldType):
    pass


@dataclass(frozen=True)
class Float(FieldType):
    pass


@dataclass(frozen=True)
class Text(FieldType):
    pass


@dataclass(frozen=True)
class Json(FieldType):
    pass


@dataclass(frozen=True)
class VarChar(FieldType):
    size: int = 191


@dataclass(frozen=True)
class VarBinary(FieldType):
    size: int = 191


@dataclass(frozen=True)
class EnumType(FieldType):
    """Fixed set of string cases.

    >>> EnumType.of(Status).cases
    ('ACTIVE', 'BANNED')
    """

    cases: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "cases", tuple(str(case) for case in self.cases))

    @classmethod
    def of(cls, enum_cls: type[enum.Enum]) -> EnumType:
        return cls(tuple(member.value for member in enum_cls))


@dataclass(frozen=True)
class Reference(Integer):
    """Integer column pointing at the ``id`` of another table."""

    table: str = ""

    def __post_init__(self) -> None:
        # accept a Table definition as well as its name
        name = getattr(self.table, "name", self.table)
        object.__setattr__(self, "table", name)


__all__ = [
    "FieldType",
    "Boolean",
    "Date",
    "DateTime",
    "Integer",
    "Float",
    "Text",
    "Json",
    "VarChar",
    "VarBinary",
    "EnumType",
    "Reference",
]
