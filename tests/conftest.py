"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from crease.eventstore import SQLAlchemyEventStore

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


def sqlite_url(tmp_path: Path) -> str:
    """Return an aiosqlite URL for a throwaway database under ``tmp_path``."""
    return f"sqlite+aiosqlite:///{tmp_path / 'crease_test.db'}"


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Yield an async engine backed by a temporary SQLite file."""
    engine = create_async_engine(sqlite_url(tmp_path))
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def event_store(engine: AsyncEngine) -> typ.AsyncIterator[SQLAlchemyEventStore]:
    """Yield a connected SQLAlchemy event store."""
    store = SQLAlchemyEventStore(engine)
    connected = await store.connect()
    assert connected, "expected the SQLite event store to connect"
    try:
        yield store
    finally:
        await store.close()
