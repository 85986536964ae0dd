"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from partybook.api.deps import (
    get_actor_id,
    get_db,
    get_sync_service,
    get_transition_service,
)
from partybook.config import settings
from partybook.core.exceptions import NotBookingParticipant
from partybook.domain.booking_state import ActorRole, BookingStatus
from partybook.domain.countdown import RemainingTime, remaining
from partybook.models.booking import Booking
from partybook.schemas.booking import (
    BookingCountdownResponse,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusChangeRequest,
    RemainingTimeResponse,
)
from partybook.services.booking_store import BookingStore
from partybook.services.sync_service import StatusSyncService, SyncScope
from partybook.services.transition_service import TransitionService
from partybook.utils.dates import utcnow

router = APIRouter()


def _remaining_response(value: RemainingTime) -> RemainingTimeResponse:
    return RemainingTimeResponse(
        text=value.text,
        elapsed=value.elapsed,
        seconds_remaining=int(value.duration.total_seconds()),
    )


def _assert_can_view(booking: Booking, actor_id: UUID) -> None:
    if actor_id not in (booking.requester_id, booking.provider_id):
        raise NotBookingParticipant("You don't have permission to access this booking")


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    transitions: Annotated[TransitionService, Depends(get_transition_service)],
) -> Booking:
    """Request a booking; it starts pending and the DJ is notified."""
    booking = await BookingStore(db).create_booking(
        requester_id=actor_id,
        **booking_data.model_dump(),
    )
    return await transitions.deliver_side_effects(booking)


@router.get("/", response_model=BookingListResponse)
async def get_my_bookings(
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    sync: Annotated[StatusSyncService, Depends(get_sync_service)],
    role: ActorRole | None = Query(default=None),
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
) -> BookingListResponse:
    """Get the actor's bookings, bringing their statuses up to date first."""
    await sync.evaluate_due_transitions(SyncScope.for_actor(actor_id, role))

    bookings = await BookingStore(db).list_bookings_for_actor(actor_id, role, status_filter)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get a booking by ID."""
    booking = await BookingStore(db).get_booking(booking_id)
    _assert_can_view(booking, actor_id)
    return booking


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def change_booking_status(
    booking_id: UUID,
    request: BookingStatusChangeRequest,
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    transitions: Annotated[TransitionService, Depends(get_transition_service)],
) -> Booking:
    """Confirm, reject or cancel a booking."""
    return await transitions.request_transition(
        booking_id,
        request.status,
        actor_id,
        reason=request.reason,
    )


@router.get("/{booking_id}/countdown", response_model=BookingCountdownResponse)
async def get_booking_countdown(
    booking_id: UUID,
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingCountdownResponse:
    """Timers shown next to a booking.

    - confirmation: time left for the DJ to answer a pending booking
    - cancellation: time left to cancel a confirmed booking
    - event_start: time until the event of a confirmed booking
    """
    booking = await BookingStore(db).get_booking(booking_id)
    _assert_can_view(booking, actor_id)

    now = utcnow()
    response = BookingCountdownResponse(booking_id=booking.id, status=booking.status)

    if booking.status == BookingStatus.PENDING:
        response.confirmation = _remaining_response(
            remaining(booking.created_at, settings.confirmation_window_days, now)
        )
    elif booking.status == BookingStatus.CONFIRMED:
        response.cancellation = _remaining_response(
            remaining(booking.event_start, -settings.cancellation_window_days, now)
        )
        response.event_start = _remaining_response(remaining(booking.event_start, 0, now))

    return response
