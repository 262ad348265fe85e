"""SQLAlchemy implementation of the EventStoreClient protocol."""

from __future__ import annotations

import typing as typ
import uuid

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from crease.deliveries.models import delivery_to_payload
from crease.deliveries.validation import (
    DeliveryValidator,
    Invalid,
    Valid,
    ValidationFailed,
)
from crease.eventstore.errors import EventStoreError
from crease.eventstore.storage import DeliveryRecord, init_event_storage
from crease.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from crease.deliveries.models import DeliveryEvent
    from crease.deliveries.validation import Validator
    from crease.eventstore.config import EventStoreConfig

logger = get_logger(__name__)


class SQLAlchemyEventStore:
    """Append-only delivery store on an async SQLAlchemy engine.

    Every call opens its own session from a shared ``async_sessionmaker``,
    so one instance can serve concurrent requests; the engine's connection
    pool provides the synchronisation.

    Parameters
    ----------
    engine
        Async engine bound to the event store database. The store disposes
        it on :meth:`close`.
    validator
        Validator used when ``push_event`` is called with ``validate=True``.

    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        validator: Validator | None = None,
    ) -> None:
        """Bind the store to ``engine``."""
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine, expire_on_commit=False
        )
        self._validator = validator or DeliveryValidator()
        self._connected = False

    @classmethod
    def from_config(cls, config: EventStoreConfig) -> SQLAlchemyEventStore:
        """Create a store with a fresh engine for ``config.database_url``."""
        return cls(create_async_engine(config.database_url))

    @property
    def connected(self) -> bool:
        """Return whether :meth:`connect` has succeeded."""
        return self._connected

    async def connect(self) -> bool:
        """Create the schema if needed and probe the database.

        Returns
        -------
        bool
            ``True`` when the store is ready for writes.

        """
        try:
            await init_event_storage(self._engine)
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            log_error(
                logger,
                "Unable to connect to event store at %s: %s",
                self._engine.url.render_as_string(hide_password=True),
                exc,
            )
            self._connected = False
            return False

        log_info(
            logger,
            "Connected to event store at %s",
            self._engine.url.render_as_string(hide_password=True),
        )
        self._connected = True
        return True

    def _check_event(self, event: DeliveryEvent) -> None:
        match self._validator.validate(event):
            case Valid():
                return
            case Invalid(reason=reason):
                raise EventStoreError.rejected(reason)
            case ValidationFailed(error=error):
                raise EventStoreError.rejected(str(error))

    async def push_event(self, event: DeliveryEvent, *, validate: bool) -> str:
        """Append ``event`` and return its generated identifier.

        Raises
        ------
        EventStoreError
            If the store is not connected, store-side validation refuses
            the event, or the database write fails.

        """
        if not self._connected:
            raise EventStoreError.not_connected()
        if validate:
            self._check_event(event)

        record = DeliveryRecord(
            event_id=str(uuid.uuid4()),
            match_id=event.match_id,
            event_type=event.event_type,
            payload=delivery_to_payload(event),
        )
        # SQLite raises OverflowError for integers outside its signed 64-bit range.
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
        except (SQLAlchemyError, OverflowError) as exc:
            raise EventStoreError.write_failed(str(exc)) from exc
        return record.event_id

    async def close(self) -> None:
        """Dispose the engine and mark the store disconnected."""
        self._connected = False
        await self._engine.dispose()
