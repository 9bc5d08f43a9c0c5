"""Versioned, hand-written migrations.

A migration is split in two phases so a deploy can add what the new code
needs before the old code stops running, and remove what it no longer
needs afterwards:

- ``constructive``: additive changes that old code tolerates
- ``destructive``: removals that only new code tolerates

Each phase has a revert. ``Migrator`` records which phases of which
version have run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from accessdb.migrations.changes import Change


class Migration(ABC):
    """Base class for one migration version.

    Example::

        class AddUserRole(Migration):
            version = "2025080412000"

            def constructive(self):
                return [AddField("users", Field("role", types.VarChar(30), None))]

            def revert_constructive(self):
                return [RemoveField("users", "role")]
    """

    #: Identifier stored in the migrations table; defaults to the class name
    version: ClassVar[str | None] = None

    @classmethod
    def get_version(cls) -> str:
        return cls.version or cls.__name__

    @abstractmethod
    def constructive(self) -> Sequence[Change]:
        ...

    def destructive(self) -> Sequence[Change]:
        return []

    @abstractmethod
    def revert_constructive(self) -> Sequence[Change]:
        ...

    def revert_destructive(self) -> Sequence[Change]:
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.get_version()!r})"


__all__ = ["Migration"]
