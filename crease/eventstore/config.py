"""Configuration for the SQLAlchemy-backed event store."""

from __future__ import annotations

import dataclasses
import os

_DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///crease-events.db"


@dataclasses.dataclass(frozen=True, slots=True)
class EventStoreConfig:
    """Connection settings for the event store.

    Attributes
    ----------
    database_url
        SQLAlchemy async database URL.

    """

    database_url: str = _DEFAULT_DATABASE_URL

    @classmethod
    def from_env(cls) -> EventStoreConfig:
        """Build configuration from ``CREASE_DATABASE_URL``.

        An unset or blank value selects the local SQLite default.
        """
        database_url = os.environ.get("CREASE_DATABASE_URL", "").strip()
        return cls(database_url=database_url or _DEFAULT_DATABASE_URL)
