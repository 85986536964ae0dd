"""Tests for the booking state machine and cancellation window."""

# ruff: noqa: S101

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from partybook.core.exceptions import IllegalTransition, WindowClosed
from partybook.domain.booking_state import (
    BookingStatus,
    assert_booking_transition,
    automatic_deadline,
    due_transition,
    is_terminal,
)
from partybook.domain.cancellation_policy import (
    assert_cancellation_open,
    cancellation_deadline,
    is_cancellation_open,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeBooking:
    status: BookingStatus
    created_at: datetime = NOW - timedelta(hours=1)
    event_start: datetime = NOW + timedelta(days=30)
    event_end: datetime = NOW + timedelta(days=30, hours=6)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.REJECTED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    ],
)
def test_allowed_manual_transitions(current, target):
    assert_booking_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.PENDING, BookingStatus.ONGOING),
        (BookingStatus.CONFIRMED, BookingStatus.REJECTED),
        (BookingStatus.CONFIRMED, BookingStatus.ENDED),
        (BookingStatus.ONGOING, BookingStatus.CANCELLED),
        (BookingStatus.UNCONFIRMED, BookingStatus.CONFIRMED),
        (BookingStatus.REJECTED, BookingStatus.CONFIRMED),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.ENDED, BookingStatus.CANCELLED),
    ],
)
def test_illegal_manual_transitions(current, target):
    with pytest.raises(IllegalTransition) as exc_info:
        assert_booking_transition(current, target)

    assert exc_info.value.status_code == 409
    assert current.value in exc_info.value.detail


def test_terminal_statuses():
    terminal = {status for status in BookingStatus if is_terminal(status)}

    assert terminal == {
        BookingStatus.ENDED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
        BookingStatus.UNCONFIRMED,
    }


def test_pending_becomes_unconfirmed_after_two_days():
    booking = FakeBooking(BookingStatus.PENDING, created_at=NOW - timedelta(days=2))

    assert automatic_deadline(booking) == NOW
    assert due_transition(booking, NOW) == BookingStatus.UNCONFIRMED
    assert due_transition(booking, NOW - timedelta(seconds=1)) is None


def test_confirmed_booking_after_event_steps_through_ongoing():
    booking = FakeBooking(
        BookingStatus.CONFIRMED,
        event_start=NOW - timedelta(hours=8),
        event_end=NOW - timedelta(hours=2),
    )

    assert due_transition(booking, NOW) == BookingStatus.ONGOING

    booking.status = BookingStatus.ONGOING
    assert due_transition(booking, NOW) == BookingStatus.ENDED


def test_confirmed_before_event_has_nothing_due():
    booking = FakeBooking(BookingStatus.CONFIRMED)

    assert due_transition(booking, NOW) is None


@pytest.mark.parametrize(
    "status",
    [BookingStatus.ENDED, BookingStatus.REJECTED, BookingStatus.CANCELLED, BookingStatus.UNCONFIRMED],
)
def test_terminal_bookings_never_have_transitions_due(status):
    booking = FakeBooking(
        status,
        created_at=NOW - timedelta(days=60),
        event_start=NOW - timedelta(days=40),
        event_end=NOW - timedelta(days=39),
    )

    assert automatic_deadline(booking) is None
    assert due_transition(booking, NOW) is None


def test_cancellation_deadline_is_fourteen_days_before_start():
    event_start = NOW + timedelta(days=20)

    assert cancellation_deadline(event_start) == NOW + timedelta(days=6)


@pytest.mark.parametrize(
    ("until_event", "expected"),
    [
        (timedelta(days=20), True),
        (timedelta(days=14, seconds=1), True),
        (timedelta(days=14), True),
        (timedelta(days=14) - timedelta(seconds=1), False),
        (timedelta(days=10), False),
        (timedelta(days=-1), False),
    ],
)
def test_cancellation_window_boundary(until_event, expected):
    assert is_cancellation_open(NOW + until_event, NOW) is expected


def test_closed_window_raises():
    with pytest.raises(WindowClosed) as exc_info:
        assert_cancellation_open(NOW + timedelta(days=13), NOW)

    assert exc_info.value.status_code == 422
    assert "14 days" in exc_info.value.detail
