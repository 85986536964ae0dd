"""Celery background tasks for booking status reconciliation."""

import asyncio
from uuid import UUID

from celery import shared_task

from partybook.core.background_tasks import run_status_sweep
from partybook.core.exceptions import PersistenceFailure
from partybook.database import get_db_context
from partybook.domain.booking_state import ActorRole
from partybook.services.sync_service import StatusSyncService, SyncScope


_loop: asyncio.AbstractEventLoop | None = None


def run_async(coro):
    """Run async function in sync context.

    One loop per worker process; the pooled database connections are bound to it.
    """
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
    return _loop.run_until_complete(coro)


@shared_task(bind=True, max_retries=3)
def sweep_booking_statuses(self):
    """Apply due time-driven transitions to all bookings.

    Runs every few minutes from Celery beat. Missed reload signals are
    healed by this sweep re-deriving the same state.
    """
    changed = run_async(run_status_sweep(trigger="celery"))
    if changed is None:
        raise self.retry(exc=PersistenceFailure("status sweep failed"), countdown=60)
    return {"status": "success", "changed": changed}


@shared_task
def sync_actor_bookings(actor_id: str, role: str | None = None):
    """Evaluate one actor's bookings, e.g. right after they log in."""
    scope = SyncScope.for_actor(UUID(actor_id), ActorRole(role) if role else None)
    changed = run_async(_sync_actor_bookings(scope))
    return {"status": "success", "changed": changed}


async def _sync_actor_bookings(scope: SyncScope) -> list[str]:
    async with get_db_context() as db:
        changed = await StatusSyncService(db).evaluate_due_transitions(scope)
        return [str(booking.id) for booking in changed]
