"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from partybook.domain.booking_state import ActorRole, BookingStatus
from partybook.utils.dates import as_utc


class BookingBase(BaseModel):
    """Base booking schema."""

    provider_id: UUID
    event_start: datetime
    event_end: datetime
    location: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    party_type: str = Field(..., min_length=1, max_length=100)
    guests: str = Field(..., min_length=1, max_length=50)
    age_range: str = Field(..., min_length=1, max_length=50)
    music_genres: list[str] = Field(default_factory=list)
    additional_services: list[str] = Field(default_factory=list)

    @field_validator("event_end")
    @classmethod
    def validate_event_end(cls, v: datetime, info) -> datetime:
        event_start = info.data.get("event_start")
        # Naive timestamps are taken as UTC, like everywhere else
        if event_start and as_utc(v) <= as_utc(event_start):
            raise ValueError("event_end must be after event_start")
        return v


class BookingCreate(BookingBase):
    """Schema for requesting a booking."""


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    requester_id: UUID
    provider_id: UUID

    # Event
    event_start: datetime
    event_end: datetime
    location: str
    address: str
    city: str
    postal_code: str
    party_type: str
    guests: str
    age_range: str
    music_genres: list[str]
    additional_services: list[str]

    # Status
    status: BookingStatus
    transition_applied: bool
    version: int
    cancellation_reason: str | None

    # Timestamps
    created_at: datetime
    status_changed_at: datetime | None
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for booking list."""

    bookings: list[BookingResponse]
    total: int


class BookingStatusChangeRequest(BaseModel):
    """Schema for a manual status change (confirm, reject, cancel)."""

    status: BookingStatus
    reason: str | None = Field(None, max_length=1000)


class RemainingTimeResponse(BaseModel):
    """Countdown to a single deadline."""

    text: str
    elapsed: bool
    seconds_remaining: int


class BookingCountdownResponse(BaseModel):
    """Countdowns relevant to a booking's current status."""

    booking_id: UUID
    status: BookingStatus
    confirmation: RemainingTimeResponse | None = None
    cancellation: RemainingTimeResponse | None = None
    event_start: RemainingTimeResponse | None = None


class SyncRequest(BaseModel):
    """Schema for triggering an evaluation pass."""

    actor_id: UUID | None = None
    role: ActorRole | None = None


class SyncResponse(BaseModel):
    """Result of an evaluation pass."""

    changed: list[BookingResponse]
    count: int
    evaluated_at: datetime
