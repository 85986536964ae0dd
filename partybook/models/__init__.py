"""Database models."""

from partybook.models.booking import Booking
from partybook.models.notification import Notification

__all__ = [
    "Booking",
    "Notification",
]
