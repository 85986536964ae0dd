"""Pydantic schemas for request/response validation."""

from partybook.schemas.booking import (
    BookingCountdownResponse,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusChangeRequest,
    RemainingTimeResponse,
    SyncRequest,
    SyncResponse,
)
from partybook.schemas.notification import (
    LiveInitMessage,
    NotificationEvent,
    NotificationListResponse,
    NotificationResponse,
)

__all__ = [
    # Booking
    "BookingCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingStatusChangeRequest",
    "BookingCountdownResponse",
    "RemainingTimeResponse",
    "SyncRequest",
    "SyncResponse",
    # Notification
    "LiveInitMessage",
    "NotificationEvent",
    "NotificationResponse",
    "NotificationListResponse",
]
