"""Booking record store.

The single writer of booking rows. Every write is a compare-and-swap on the
``version`` column, so two evaluators that read the same row cannot both
apply a change to it.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partybook.core.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from partybook.domain.booking_state import TERMINAL_STATUSES, ActorRole, BookingStatus
from partybook.models.booking import Booking
from partybook.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class BookingStore:
    """Persistence operations for bookings, bound to one session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_booking(self, booking_id: UUID) -> Booking:
        """Load the current committed state of a booking.

        Raises:
            NotFoundError: If no booking has this id
        """
        result = await self.db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def list_bookings_for_actor(
        self,
        actor_id: UUID,
        role: ActorRole | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        """Bookings where the actor is requester, provider, or either."""
        query = select(Booking).where(self._actor_clause(actor_id, role))
        if status is not None:
            query = query.where(Booking.status == status)
        query = query.order_by(Booking.created_at.desc()).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_bookings_for_sweep(
        self,
        actor_id: UUID | None = None,
        role: ActorRole | None = None,
    ) -> list[Booking]:
        """Bookings that may still need work from the status sync.

        Non-terminal bookings can have a time-driven transition due; terminal
        ones are included only while their side effects are undelivered.
        """
        query = select(Booking).where(
            or_(
                Booking.status.not_in(list(TERMINAL_STATUSES)),
                Booking.transition_applied == False,  # noqa: E712
            )
        )
        if actor_id is not None:
            query = query.where(self._actor_clause(actor_id, role))
        query = query.order_by(Booking.created_at).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_booking(self, **fields: Any) -> Booking:
        """Insert a new pending booking.

        Raises:
            ValidationError: If the event does not end after it starts
        """
        if as_utc(fields["event_start"]) >= as_utc(fields["event_end"]):
            raise ValidationError("event_end must be after event_start")

        booking = Booking(status=BookingStatus.PENDING, transition_applied=False, version=1, **fields)
        self.db.add(booking)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailure(str(e)) from e
        await self.db.refresh(booking)
        return booking

    async def save_booking(self, booking: Booking, **values: Any) -> Booking:
        """Write ``values`` if the row still has the version we read.

        Args:
            booking: Booking as last read; its version is the expected one
            **values: Columns to update

        Returns:
            Booking: Refreshed booking with the new version

        Raises:
            ConflictError: If another writer got there first
            PersistenceFailure: If the database write failed
        """
        booking_id = booking.id
        expected_version = booking.version
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.version == expected_version)
            .values(version=expected_version + 1, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                raise ConflictError("Booking", str(booking_id))
            await self.db.commit()
            await self.db.refresh(booking)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailure(str(e)) from e

        return booking

    async def mark_transition_applied(self, booking: Booking) -> bool:
        """Claim delivery of the side effects for the booking's current status.

        Returns:
            bool: True for exactly one caller per status change
        """
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.version == booking.version,
                Booking.transition_applied == False,  # noqa: E712
            )
            .values(transition_applied=True, version=booking.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(stmt)
            claimed = result.rowcount == 1
            await self.db.commit()
            await self.db.refresh(booking)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailure(str(e)) from e

        return claimed

    @staticmethod
    def _actor_clause(actor_id: UUID, role: ActorRole | None):
        if role == ActorRole.REQUESTER:
            return Booking.requester_id == actor_id
        if role == ActorRole.PROVIDER:
            return Booking.provider_id == actor_id
        return or_(Booking.requester_id == actor_id, Booking.provider_id == actor_id)
