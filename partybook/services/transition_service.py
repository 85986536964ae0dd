"""Booking transition service.

Applies status changes to stored bookings: manual ones requested by the
requester or performer, and time-driven ones found due by the status sync.
All writes go through the BookingStore's version check; side effects are
delivered by whoever claims the booking's ``transition_applied`` flag.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from partybook.core.exceptions import (
    ConflictError,
    NotBookingParticipant,
    PersistenceFailure,
    WindowClosed,
)
from partybook.domain.booking_state import (
    PROVIDER_ONLY_TARGETS,
    BookingStatus,
    assert_booking_transition,
    due_transition,
)
from partybook.domain.cancellation_policy import assert_cancellation_open
from partybook.models.booking import Booking
from partybook.services.booking_store import BookingStore
from partybook.services.notification_service import BookingNotifier, NotificationChannel
from partybook.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Outcome of evaluating one booking against the clock."""

    booking: Booking
    applied: list[BookingStatus] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


class TransitionService:
    """Validates and applies booking status transitions."""

    MAX_ATTEMPTS = 3

    def __init__(self, db: AsyncSession, channel: NotificationChannel | None = None) -> None:
        self.store = BookingStore(db)
        self.notifier = BookingNotifier(db, channel)

    async def evaluate(self, booking: Booking, now: datetime | None = None) -> EvaluationResult:
        """Apply every time-driven transition that is due, one step at a time.

        A confirmed booking past its end passes through ongoing before ended;
        each step is persisted and notified on its own.

        Raises:
            PersistenceFailure: If a write fails; the flag stays unset and the
                next sweep retries
        """
        now = as_utc(now) if now is not None else utcnow()
        booking_id = booking.id
        applied: list[BookingStatus] = []

        while True:
            target = due_transition(booking, now)
            if target is None:
                break

            previous = booking.status
            try:
                booking = await self.store.save_booking(
                    booking,
                    status=target,
                    transition_applied=False,
                    status_changed_at=now,
                )
            except ConflictError:
                logger.debug(f"Booking {booking_id} changed concurrently, re-reading")
                booking = await self.store.get_booking(booking_id)
                continue

            applied.append(target)
            logger.info(f"Booking {booking_id} transitioned: {previous.value} → {target.value}")
            booking = await self.deliver_side_effects(booking)

        if not booking.transition_applied:
            booking = await self.deliver_side_effects(booking)

        return EvaluationResult(booking=booking, applied=applied)

    async def request_transition(
        self,
        booking_id: UUID,
        target_status: BookingStatus | str,
        actor_id: UUID,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """Apply a manual transition requested by an actor.

        Any time-driven transition already due is applied first, so the
        request is validated against the booking's real current status.

        Raises:
            NotFoundError: Unknown booking
            NotBookingParticipant: Actor may not request this change
            IllegalTransition: Target not reachable from the current status
            WindowClosed: Cancellation requested inside the cut-off
            PersistenceFailure: Storage failed or kept conflicting
        """
        now = as_utc(now) if now is not None else utcnow()
        target = BookingStatus(target_status)

        for _ in range(self.MAX_ATTEMPTS):
            booking = await self.store.get_booking(booking_id)
            self._assert_participant(booking, actor_id, target)

            booking = (await self.evaluate(booking, now)).booking
            previous = booking.status

            assert_booking_transition(previous, target)
            if target == BookingStatus.CANCELLED:
                try:
                    assert_cancellation_open(booking.event_start, now)
                except WindowClosed:
                    logger.info(f"Cancellation of booking {booking_id} refused: window closed")
                    raise

            values: dict = {
                "status": target,
                "transition_applied": False,
                "status_changed_at": now,
            }
            if target == BookingStatus.CANCELLED:
                values["cancellation_reason"] = reason

            try:
                booking = await self.store.save_booking(booking, **values)
            except ConflictError:
                logger.debug(f"Booking {booking_id} changed during {target.value} request, retrying")
                continue

            logger.info(
                f"Booking {booking_id} transitioned: {previous.value} → {target.value} "
                f"(requested by {actor_id})"
            )
            return await self.deliver_side_effects(booking)

        raise PersistenceFailure(f"booking {booking_id} kept changing, please retry")

    async def deliver_side_effects(self, booking: Booking) -> Booking:
        """Notify about the booking's current status if nobody else has."""
        booking_id = booking.id
        if not await self.store.mark_transition_applied(booking):
            return booking
        await self.notifier.booking_status_changed(booking)
        return await self.store.get_booking(booking_id)

    @staticmethod
    def _assert_participant(booking: Booking, actor_id: UUID, target: BookingStatus) -> None:
        if target in PROVIDER_ONLY_TARGETS:
            if actor_id != booking.provider_id:
                raise NotBookingParticipant("Only the DJ can confirm or reject a booking")
            return
        if actor_id not in (booking.requester_id, booking.provider_id):
            raise NotBookingParticipant()
