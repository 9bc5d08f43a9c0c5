"""Environment-driven settings for accessdb.

``AccessSettings`` collects the handful of knobs an application sets once at
startup: which dialect renders queries by default, how large a cursor page
is, whether migrations run for real, and how logging is configured.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    A typo in ``ACCESSDB_DIALECT`` must fail at startup, not on the first
    rendered query.

    - **Pydantic validation:** Type-checked when the settings are built
    - **Environment-driven:** Reads ``ACCESSDB_*`` env vars and ``.env``
    - **No process-wide mutation:** Cursors copy the page size, they never
      write it back

Examples:
    >>> from accessdb.settings import AccessSettings
    >>> settings = AccessSettings(dialect="sqlite", page_size=20)
    >>> settings.get_dialect().name
    'sqlite'
    >>> settings.page_cursor().page_size
    20

Tags:
    settings, configuration, pydantic, environment, accessdb
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from accessdb.dialect import Dialect
    from accessdb.query.cursor import PageCursor


class AccessSettings(BaseSettings):
    """Settings shared by the query builder and the migration engine.

    Fields
    ──────
    dialect      : Registered dialect name used when none is passed explicitly
    page_size    : Page size for cursors built from settings
    dry_run      : Render migrations without executing them
    log_level    : Structlog log level
    log_json     : Force JSON (True) or console (False) output; None = auto
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCESSDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Rendering ────────────────────────────────────────────────
    dialect: str = "mysql"
    page_size: int = Field(default=50, ge=1)

    # ── Migrations ───────────────────────────────────────────────
    dry_run: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("dialect")
    @classmethod
    def _known_dialect(cls, value: str) -> str:
        from accessdb.dialect import available_dialects

        name = value.lower()
        if name not in available_dialects():
            raise ValueError(
                f"Unknown dialect '{value}'. Supported: {sorted(available_dialects())}"
            )
        return name

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def get_dialect(self) -> Dialect:
        from accessdb.dialect import get_dialect

        return get_dialect(self.dialect)

    def page_cursor(self, page: int = 0) -> PageCursor:
        """Build a ``PageCursor`` sized from these settings."""
        from accessdb.query.cursor import PageCursor

        return PageCursor(page, page_size=self.page_size)

    def configure_logging(self) -> None:
        from accessdb.logging import configure_logging

        configure_logging(level=self.log_level, json_format=self.log_json)


@lru_cache(maxsize=1)
def get_settings() -> AccessSettings:
    """Return the process settings, built from the environment on first use."""
    return AccessSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings`` re-reads env."""
    get_settings.cache_clear()


__all__ = [
    "AccessSettings",
    "get_settings",
    "reset_settings",
]
