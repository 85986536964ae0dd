"""Shared fixtures: a throwaway SQLite database and a recording channel."""

from __future__ import annotations

import os

# Configure before any partybook import creates the global engine/settings
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ["STATUS_SWEEP_ENABLED"] = "false"
os.environ["LIVE_SYNC_INTERVAL_SECONDS"] = "0"
os.environ["NOTIFICATION_BACKEND"] = "memory"

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import partybook.models  # noqa: F401
from partybook.database import Base
from partybook.models.booking import Booking
from partybook.schemas.notification import NotificationEvent
from partybook.services.booking_store import BookingStore
from partybook.services.notification_service import NotificationChannel

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


class RecordingChannel(NotificationChannel):
    """In-memory channel that remembers everything published."""

    def __init__(self) -> None:
        super().__init__(backend="memory")
        self.published: list[NotificationEvent] = []

    async def publish(self, actor_id: UUID, event: NotificationEvent) -> None:
        self.published.append(event)
        await super().publish(actor_id, event)

    def events_for(self, actor_id: UUID) -> list[NotificationEvent]:
        return [event for event in self.published if event.actor_id == actor_id]


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'partybook.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def requester_id() -> UUID:
    return uuid.uuid4()


@pytest.fixture
def provider_id() -> UUID:
    return uuid.uuid4()


def booking_fields(requester_id: UUID, provider_id: UUID, **overrides: Any) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "requester_id": requester_id,
        "provider_id": provider_id,
        "created_at": NOW - timedelta(hours=1),
        "event_start": NOW + timedelta(days=30),
        "event_end": NOW + timedelta(days=30, hours=6),
        "location": "Warehouse 9",
        "address": "Portowa 12",
        "city": "Gdansk",
        "postal_code": "80-001",
        "party_type": "Birthday",
        "guests": "50-100",
        "age_range": "25-35",
        "music_genres": ["house", "disco"],
        "additional_services": ["lights"],
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_booking(
    db: AsyncSession, requester_id: UUID, provider_id: UUID
) -> Callable[..., Awaitable[Booking]]:
    """Create a booking directly in the store.

    ``status`` places it anywhere in the lifecycle; ``delivered`` marks the
    side effects of that status as already sent.
    """

    async def _make(status=None, delivered: bool = True, **overrides: Any) -> Booking:
        store = BookingStore(db)
        fields = {"requester_id": requester_id, "provider_id": provider_id, **overrides}
        booking = await store.create_booking(**booking_fields(**fields))
        if status is not None:
            booking = await store.save_booking(booking, status=status)
        if delivered:
            await store.mark_transition_applied(booking)
        return booking

    return _make
