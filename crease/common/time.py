"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp for event store defaults."""
    return dt.datetime.now(dt.UTC)


def parse_timestamp(value: str) -> dt.datetime:
    """Parse an ISO-8601 delivery timestamp, accepting a trailing ``Z``.

    Raises
    ------
    ValueError
        If ``value`` is not an ISO-8601 timestamp.

    """
    return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
