"""Tests for the periodic status sweep and its Celery task."""

# ruff: noqa: S101

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

import pytest

from partybook import tasks
from partybook.core import background_tasks
from partybook.domain.booking_state import BookingStatus
from partybook.services.booking_store import BookingStore


@pytest.mark.asyncio
async def test_sweep_applies_due_transitions(db, session_factory, channel, make_booking, monkeypatch, requester_id):
    booking = await make_booking(created_at=datetime.now(UTC) - timedelta(days=3))

    @asynccontextmanager
    async def test_db_context():
        async with session_factory() as session:
            yield session
            await session.commit()

    monkeypatch.setattr(background_tasks, "get_db_context", test_db_context)

    assert await background_tasks.run_status_sweep("test", channel) == 1
    assert await background_tasks.run_status_sweep("test", channel) == 0

    assert (await BookingStore(db).get_booking(booking.id)).status == BookingStatus.UNCONFIRMED
    assert len(channel.events_for(requester_id)) == 1


@pytest.mark.asyncio
async def test_sweep_failure_is_reported_not_raised(monkeypatch):
    @asynccontextmanager
    async def unavailable_db():
        raise ConnectionRefusedError("database is down")
        yield

    monkeypatch.setattr(background_tasks, "get_db_context", unavailable_db)

    assert await background_tasks.run_status_sweep("test") is None


@pytest.mark.asyncio
async def test_scheduler_stops_when_signalled(monkeypatch):
    runs = []

    async def fake_sweep(trigger="scheduled", channel=None):
        runs.append(trigger)
        background_tasks.stop_status_sweep_scheduler()
        return 0

    monkeypatch.setattr(background_tasks, "run_status_sweep", fake_sweep)

    await asyncio.wait_for(background_tasks.start_status_sweep_scheduler(interval_seconds=60), timeout=5)

    assert runs == ["scheduled"]


def test_celery_sweep_task_reports_changes(monkeypatch):
    async def fake_sweep(trigger="scheduled", channel=None):
        return 3

    monkeypatch.setattr(tasks, "run_status_sweep", fake_sweep)

    try:
        result = tasks.sweep_booking_statuses.apply().get()
    finally:
        if tasks._loop is not None:
            tasks._loop.close()
            tasks._loop = None
        asyncio.set_event_loop(None)

    assert result == {"status": "success", "changed": 3}
