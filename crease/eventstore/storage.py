"""Persistence models for the append-only delivery event store."""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from crease.common.time import utcnow

if typ.TYPE_CHECKING:
    from sqlalchemy.engine import Dialect
    from sqlalchemy.ext.asyncio import AsyncEngine


class Base(DeclarativeBase):
    """Base declarative class for event store models."""


class UTCDateTime(TypeDecorator[dt.datetime]):
    """DateTime that keeps UTC tzinfo on SQLite round-trips."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Store aware datetimes in UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            msg = "recorded_at must be timezone aware"
            raise ValueError(msg)
        return value.astimezone(dt.UTC)

    def process_result_value(
        self, value: dt.datetime | None, dialect: Dialect
    ) -> dt.datetime | None:
        """Return aware UTC datetimes."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value.astimezone(dt.UTC)


class DeliveryRecord(Base):
    """One appended delivery event.

    Rows are never updated or deleted. ``position`` gives the global append
    order; ``event_id`` is the identifier handed back to the gateway.
    """

    __tablename__ = "delivery_events"
    __table_args__ = (Index("ix_delivery_events_match_position", "match_id", "position"),)

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(36), unique=True)
    match_id: Mapped[int] = mapped_column(Integer)
    event_type: Mapped[str | None] = mapped_column(String(32), default=None)
    payload: Mapped[dict[str, typ.Any]] = mapped_column(JSON)
    recorded_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), default=utcnow)


async def init_event_storage(engine: AsyncEngine) -> None:
    """Create the event store tables if they are absent."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
