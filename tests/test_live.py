"""Live WebSocket observer tests."""

# ruff: noqa: S101

from __future__ import annotations

import asyncio
import time
import uuid
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.websockets import WebSocketDisconnect

from partybook.api.deps import get_db, get_notification_channel
from partybook.database import Base
from partybook.main import app
from partybook.services.notification_service import NotificationChannel


@pytest.fixture
def live_client(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'live.db'}", poolclass=NullPool)

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    channel = NotificationChannel(backend="memory")

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_channel] = lambda: channel
    with TestClient(app) as client:
        yield client, channel
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


def wait_for_subscriber(channel: NotificationChannel, actor_id, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while channel.subscriber_count(actor_id) == 0:
        if time.monotonic() > deadline:
            raise AssertionError(f"actor {actor_id} never subscribed")
        time.sleep(0.01)


def test_observer_receives_reload_on_status_change(live_client):
    client, channel = live_client
    requester_id, provider_id = uuid.uuid4(), uuid.uuid4()
    start = datetime.now(UTC) + timedelta(days=30)
    booking = client.post(
        "/api/v1/bookings/",
        json={
            "provider_id": str(provider_id),
            "event_start": start.isoformat(),
            "event_end": (start + timedelta(hours=5)).isoformat(),
            "location": "Club Ampera",
            "address": "Rynek 1",
            "city": "Wroclaw",
            "postal_code": "50-001",
            "party_type": "Corporate",
            "guests": "20-50",
            "age_range": "25-45",
        },
        headers={"X-Actor-Id": str(requester_id)},
    ).json()

    with client.websocket_connect("/api/v1/live") as websocket:
        websocket.send_json({"msg_type": "INIT", "user_id": str(requester_id)})
        wait_for_subscriber(channel, requester_id)

        response = client.post(
            f"/api/v1/bookings/{booking['id']}/status",
            json={"status": "confirmed"},
            headers={"X-Actor-Id": str(provider_id)},
        )
        assert response.status_code == 200
        message = websocket.receive_json()

    assert message == {
        "msg": "reload",
        "reason": "booking_status_changed",
        "booking_id": booking["id"],
        "status": "confirmed",
    }


def test_observer_is_unsubscribed_after_disconnect(live_client):
    client, channel = live_client
    actor_id = uuid.uuid4()

    with client.websocket_connect("/api/v1/live") as websocket:
        websocket.send_json({"msg_type": "INIT", "user_id": str(actor_id)})
        wait_for_subscriber(channel, actor_id)

    deadline = time.monotonic() + 2.0
    while channel.subscriber_count(actor_id) and time.monotonic() < deadline:
        time.sleep(0.01)
    assert channel.subscriber_count(actor_id) == 0


def test_invalid_init_closes_connection(live_client):
    client, _ = live_client

    with client.websocket_connect("/api/v1/live") as websocket:
        websocket.send_json({"msg_type": "HELLO", "user_id": "nobody"})
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_json()

    assert exc_info.value.code == 1008
