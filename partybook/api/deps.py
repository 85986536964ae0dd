"""API dependencies for actor identity and shared services.

Authentication lives in the accounts service in front of this API; it
forwards the authenticated user's id in the ``X-Actor-Id`` header.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from partybook.database import get_db
from partybook.services.notification_service import NotificationChannel, notification_channel
from partybook.services.sync_service import StatusSyncService
from partybook.services.transition_service import TransitionService


async def get_actor_id(
    x_actor_id: Annotated[UUID, Header(description="Authenticated user id")],
) -> UUID:
    """Get the acting user's id."""
    return x_actor_id


def get_notification_channel() -> NotificationChannel:
    """Get the process-wide notification channel."""
    return notification_channel


async def get_transition_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
) -> TransitionService:
    return TransitionService(db, channel)


async def get_sync_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
) -> StatusSyncService:
    return StatusSyncService(db, channel)


__all__ = [
    "get_actor_id",
    "get_db",
    "get_notification_channel",
    "get_sync_service",
    "get_transition_service",
]
