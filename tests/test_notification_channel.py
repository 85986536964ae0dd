"""Tests for the in-process notification channel."""

# ruff: noqa: S101

from __future__ import annotations

import uuid

import pytest

from partybook.domain.booking_state import BookingStatus
from partybook.schemas.notification import NotificationEvent
from partybook.services.notification_service import NotificationChannel


def make_event(actor_id, status=BookingStatus.CONFIRMED) -> NotificationEvent:
    return NotificationEvent(
        actor_id=actor_id,
        reason="booking_status_changed",
        booking_id=uuid.uuid4(),
        status=status,
    )


@pytest.mark.asyncio
async def test_publish_reaches_only_the_actor():
    channel = NotificationChannel(backend="memory")
    alice, bob = uuid.uuid4(), uuid.uuid4()
    received: dict = {alice: [], bob: []}
    channel.subscribe(alice, received[alice].append)
    channel.subscribe(bob, received[bob].append)

    event = make_event(alice)
    await channel.publish(alice, event)

    assert received[alice] == [event]
    assert received[bob] == []


@pytest.mark.asyncio
async def test_async_handlers_are_awaited():
    channel = NotificationChannel(backend="memory")
    actor = uuid.uuid4()
    received = []

    async def handler(event):
        received.append(event.status)

    channel.subscribe(actor, handler)
    await channel.publish(actor, make_event(actor, BookingStatus.ENDED))

    assert received == [BookingStatus.ENDED]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    channel = NotificationChannel(backend="memory")
    actor = uuid.uuid4()
    received = []
    unsubscribe = channel.subscribe(actor, received.append)

    unsubscribe()
    await channel.publish(actor, make_event(actor))

    assert received == []
    assert channel.subscriber_count(actor) == 0


@pytest.mark.asyncio
async def test_failing_handler_does_not_block_others():
    channel = NotificationChannel(backend="memory")
    actor = uuid.uuid4()
    received = []

    def broken(event):
        raise RuntimeError("socket gone")

    channel.subscribe(actor, broken)
    channel.subscribe(actor, received.append)

    delivered = await channel.dispatch_local(make_event(actor))

    assert delivered == 1
    assert len(received) == 1


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_a_no_op():
    channel = NotificationChannel(backend="memory")
    actor = uuid.uuid4()

    await channel.publish(actor, make_event(actor))

    assert await channel.dispatch_local(make_event(actor)) == 0


@pytest.mark.asyncio
async def test_publish_readdresses_event():
    channel = NotificationChannel(backend="memory")
    requester, provider = uuid.uuid4(), uuid.uuid4()
    received = []
    channel.subscribe(provider, received.append)

    await channel.publish(provider, make_event(requester))

    assert received[0].actor_id == provider


def test_client_message_frame():
    booking_id = uuid.uuid4()
    event = NotificationEvent(
        actor_id=uuid.uuid4(),
        reason="booking_status_changed",
        booking_id=booking_id,
        status=BookingStatus.UNCONFIRMED,
    )

    assert event.to_client_message() == {
        "msg": "reload",
        "reason": "booking_status_changed",
        "booking_id": str(booking_id),
        "status": "unconfirmed",
    }
