"""Append-only event store for delivery events."""

from __future__ import annotations

from .client import SQLAlchemyEventStore
from .config import EventStoreConfig
from .errors import EventStoreError
from .protocol import EventStoreClient
from .storage import DeliveryRecord, init_event_storage

__all__ = [
    "DeliveryRecord",
    "EventStoreClient",
    "EventStoreConfig",
    "EventStoreError",
    "SQLAlchemyEventStore",
    "init_event_storage",
]
