"""Event store errors."""

from __future__ import annotations


class EventStoreError(RuntimeError):
    """Raised when a delivery cannot be appended to the event store."""

    @classmethod
    def not_connected(cls) -> EventStoreError:
        """Return an error for writes attempted before ``connect()``."""
        return cls("event store is not connected")

    @classmethod
    def write_failed(cls, detail: str) -> EventStoreError:
        """Return an error for a failed database write."""
        return cls(f"event store write failed: {detail}")

    @classmethod
    def rejected(cls, detail: str) -> EventStoreError:
        """Return an error for an event refused by store-side validation."""
        return cls(f"event store rejected event: {detail}")

    @classmethod
    def connect_failed(cls) -> EventStoreError:
        """Return an error for a store that could not be opened at startup."""
        return cls("unable to connect to event store")
