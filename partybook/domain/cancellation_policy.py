"""Cancellation window domain logic.

A confirmed booking may be cancelled while at least ``cancellation_window_days``
(14 by default) remain before the event starts. The boundary is closed:
exactly 14 days before the start still allows cancellation.
"""

from datetime import datetime, timedelta

from partybook.config import settings
from partybook.core.exceptions import WindowClosed
from partybook.utils.dates import as_utc

CANCELLATION_WINDOW = timedelta(days=settings.cancellation_window_days)


def cancellation_deadline(event_start: datetime) -> datetime:
    """Last instant at which a confirmed booking can still be cancelled."""
    return as_utc(event_start) - CANCELLATION_WINDOW


def is_cancellation_open(event_start: datetime, now: datetime) -> bool:
    return as_utc(now) <= cancellation_deadline(event_start)


def assert_cancellation_open(event_start: datetime, now: datetime) -> None:
    """Raise WindowClosed when the event is too close to cancel.

    Args:
        event_start: Booking event start
        now: Current instant

    Raises:
        WindowClosed: If fewer than the window's days remain
    """
    if not is_cancellation_open(event_start, now):
        days = settings.cancellation_window_days
        raise WindowClosed(
            f"Bookings can only be cancelled at least {days} days before the event"
        )
