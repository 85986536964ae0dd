"""Booking status synchronization.

Re-evaluates bookings against the clock and applies due time-driven
transitions (pending → unconfirmed, confirmed → ongoing, ongoing → ended).
Runs from the global sweep, from Celery beat, from live observer sessions
and on demand when an actor lists their bookings. Every pass is idempotent.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from partybook.core.exceptions import NotFoundError, PersistenceFailure
from partybook.domain.booking_state import ActorRole
from partybook.models.booking import Booking
from partybook.services.booking_store import BookingStore
from partybook.services.notification_service import NotificationChannel
from partybook.services.transition_service import TransitionService
from partybook.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncScope:
    """Which bookings an evaluation pass covers."""

    actor_id: UUID | None = None
    role: ActorRole | None = None

    @classmethod
    def everyone(cls) -> "SyncScope":
        return cls()

    @classmethod
    def for_actor(cls, actor_id: UUID, role: ActorRole | None = None) -> "SyncScope":
        return cls(actor_id=actor_id, role=role)

    @property
    def is_global(self) -> bool:
        return self.actor_id is None

    def describe(self) -> str:
        if self.is_global:
            return "all bookings"
        role = self.role.value if self.role else "any role"
        return f"actor {self.actor_id} ({role})"


class StatusSyncService:
    """Applies due time-driven transitions for a scope of bookings."""

    def __init__(self, db: AsyncSession, channel: NotificationChannel | None = None) -> None:
        self.store = BookingStore(db)
        self.transitions = TransitionService(db, channel)

    async def evaluate_due_transitions(
        self,
        scope: SyncScope | None = None,
        now: datetime | None = None,
    ) -> list[Booking]:
        """Evaluate every candidate booking in scope.

        Persistence failures are logged and skipped; the booking keeps its
        status and unset flag, so the next pass retries it.

        Returns:
            list[Booking]: Bookings whose status changed in this pass
        """
        scope = scope or SyncScope.everyone()
        now = as_utc(now) if now is not None else utcnow()

        candidates = await self.store.list_bookings_for_sweep(scope.actor_id, scope.role)
        booking_ids = [booking.id for booking in candidates]

        changed: list[Booking] = []
        failures = 0
        for booking_id in booking_ids:
            try:
                booking = await self.store.get_booking(booking_id)
                result = await self.transitions.evaluate(booking, now)
            except NotFoundError:
                continue
            except PersistenceFailure as e:
                failures += 1
                logger.warning(f"Status sync for booking {booking_id} failed, retrying next tick: {e.detail}")
                continue

            if result.changed:
                changed.append(result.booking)

        if changed or failures:
            logger.info(
                f"Status sync for {scope.describe()}: evaluated={len(booking_ids)}, "
                f"changed={len(changed)}, failed={failures}"
            )
        return changed
