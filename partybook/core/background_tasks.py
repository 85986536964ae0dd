"""Background tasks for automatic booking status reconciliation."""

import asyncio
import logging
from datetime import UTC, datetime

from partybook.config import settings
from partybook.database import get_db_context
from partybook.services.notification_service import NotificationChannel, notification_channel
from partybook.services.sync_service import StatusSyncService, SyncScope

logger = logging.getLogger(__name__)

# Flag to stop the background task
_stop_status_sweep = False


async def run_status_sweep(
    trigger: str = "scheduled",
    channel: NotificationChannel | None = None,
) -> int | None:
    """Evaluate every booking once and apply due transitions.

    Returns:
        Number of bookings changed, None if the sweep failed
    """
    started_at = datetime.now(UTC)
    logger.debug(f"Starting booking status sweep (trigger: {trigger})")

    try:
        async with get_db_context() as db:
            service = StatusSyncService(db, channel or notification_channel)
            changed = await service.evaluate_due_transitions(SyncScope.everyone(), started_at)
    except Exception as e:
        logger.error(f"Booking status sweep failed (trigger: {trigger}): {e}")
        return None

    duration_ms = int((datetime.now(UTC) - started_at).total_seconds() * 1000)
    if changed:
        logger.info(
            f"Booking status sweep completed: changed={len(changed)}, duration={duration_ms}ms"
        )
    return len(changed)


async def start_status_sweep_scheduler(interval_seconds: int | None = None) -> None:
    """Background task that sweeps booking statuses on a fixed interval."""
    global _stop_status_sweep
    _stop_status_sweep = False
    interval = interval_seconds or settings.status_sweep_interval_seconds

    logger.info(f"Booking status sweep scheduler started (every {interval}s)")

    while not _stop_status_sweep:
        await run_status_sweep(trigger="scheduled")

        # Wait for next interval (check stop flag every second)
        for _ in range(max(1, interval)):
            if _stop_status_sweep:
                break
            await asyncio.sleep(1)

    logger.info("Booking status sweep scheduler stopped")


def stop_status_sweep_scheduler() -> None:
    """Signal the status sweep scheduler to stop."""
    global _stop_status_sweep
    _stop_status_sweep = True
