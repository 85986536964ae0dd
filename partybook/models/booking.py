"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Enum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from partybook.database import Base
from partybook.domain.booking_state import BookingStatus
from partybook.utils.dates import utcnow


class Booking(Base):
    """A client's request for a performer at an event."""

    __tablename__ = "bookings"
    __table_args__ = (CheckConstraint("event_start < event_end", name="ck_bookings_event_window"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    requester_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    provider_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Event window
    event_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    event_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Event details (opaque to the state machine)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    party_type: Mapped[str] = mapped_column(String(100), nullable=False)
    guests: Mapped[str] = mapped_column(String(50), nullable=False)  # range, e.g. "50-100"
    age_range: Mapped[str] = mapped_column(String(50), nullable=False)
    music_genres: Mapped[list[str]] = mapped_column(JSON, default=list)
    additional_services: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Lifecycle
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
            validate_strings=True,
        ),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    # Side effects (notifications) of the current status were delivered
    transition_applied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    # Optimistic concurrency, bumped on every write
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    cancellation_reason: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.status.value} v{self.version}>"
