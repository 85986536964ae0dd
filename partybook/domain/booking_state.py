"""Booking state machine.

States:
- pending: Requested by a client, waiting for the performer
- confirmed: Accepted by the performer
- ongoing: Event has started
- ended: Event has finished
- unconfirmed: Performer did not answer within the confirmation window
- rejected: Declined by the performer
- cancelled: Confirmed booking withdrawn before the cancellation cut-off

Manual moves (pending → confirmed/rejected, confirmed → cancelled) are
requested by actors. Time-driven moves (pending → unconfirmed,
confirmed → ongoing, ongoing → ended) are only applied by the status sync.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from partybook.config import settings
from partybook.core.exceptions import IllegalTransition
from partybook.utils.dates import as_utc


class BookingStatus(str, Enum):
    """Booking lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ONGOING = "ongoing"
    ENDED = "ended"
    UNCONFIRMED = "unconfirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class ActorRole(str, Enum):
    """Side of the booking an actor is on."""

    REQUESTER = "requester"
    PROVIDER = "provider"


CONFIRMATION_WINDOW = timedelta(days=settings.confirmation_window_days)

TERMINAL_STATUSES = frozenset(
    {
        BookingStatus.ENDED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
        BookingStatus.UNCONFIRMED,
    }
)

BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.REJECTED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
}

AUTOMATIC_TRANSITIONS: dict[BookingStatus, BookingStatus] = {
    BookingStatus.PENDING: BookingStatus.UNCONFIRMED,
    BookingStatus.CONFIRMED: BookingStatus.ONGOING,
    BookingStatus.ONGOING: BookingStatus.ENDED,
}

# Manual moves only the performer may request
PROVIDER_ONLY_TARGETS = frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED})


class BookingTimes(Protocol):
    status: BookingStatus
    created_at: datetime
    event_start: datetime
    event_end: datetime


def is_terminal(status: BookingStatus) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def assert_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    """Validate a manually requested transition.

    Raises:
        IllegalTransition: If target is not reachable from current
    """
    current = BookingStatus(current)
    target = BookingStatus(target)
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise IllegalTransition(current.value, target.value)


def automatic_deadline(booking: BookingTimes) -> datetime | None:
    """Instant at which the booking's time-driven transition becomes due."""
    status = BookingStatus(booking.status)
    if status == BookingStatus.PENDING:
        return as_utc(booking.created_at) + CONFIRMATION_WINDOW
    if status == BookingStatus.CONFIRMED:
        return as_utc(booking.event_start)
    if status == BookingStatus.ONGOING:
        return as_utc(booking.event_end)
    return None


def due_transition(booking: BookingTimes, now: datetime) -> BookingStatus | None:
    """Return the next status if a time-driven transition is due.

    Only a single step is returned. A confirmed booking whose event already
    finished yields ongoing first; callers re-evaluate after persisting it.
    """
    deadline = automatic_deadline(booking)
    if deadline is None or as_utc(now) < deadline:
        return None
    return AUTOMATIC_TRANSITIONS[BookingStatus(booking.status)]
