"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from partybook.domain.booking_state import BookingStatus


class NotificationEvent(BaseModel):
    """Live signal telling an actor to reload a booking.

    Not persisted; carries no booking payload beyond identifiers.
    """

    actor_id: UUID
    reason: str
    booking_id: UUID | None = None
    status: BookingStatus | None = None

    def to_client_message(self) -> dict:
        """Frame sent to live observers."""
        return {
            "msg": "reload",
            "reason": self.reason,
            "booking_id": str(self.booking_id) if self.booking_id else None,
            "status": self.status.value if self.status else None,
        }


class LiveInitMessage(BaseModel):
    """First frame a live observer sends to identify itself."""

    msg_type: Literal["INIT"]
    user_id: UUID


class NotificationResponse(BaseModel):
    """Schema for in-app notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    booking_id: UUID | None
    notification_type: str
    message: str
    on_click_path: str | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Schema for paginated notification list."""

    notifications: list[NotificationResponse]
    total: int
    unread_count: int
    page: int
    page_size: int
