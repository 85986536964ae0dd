"""In-app notification endpoints.

Booking status changes leave a notification for the client (and a booking
request notification for the DJ); these routes list them and mark them seen.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import false, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from partybook.api.deps import get_actor_id, get_db
from partybook.core.exceptions import NotFoundError
from partybook.models.notification import Notification
from partybook.schemas.notification import NotificationListResponse, NotificationResponse
from partybook.utils.dates import utcnow

router = APIRouter()

_unread = Notification.is_read.is_(false())


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    unread_only: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """Newest first, with total and unread counters."""
    owned = Notification.user_id == actor_id

    counts = await db.execute(
        select(func.count(), func.count().filter(_unread)).select_from(Notification).where(owned)
    )
    total, unread_count = counts.one()
    if unread_only:
        total = unread_count

    query = select(Notification).where(owned)
    if unread_only:
        query = query.where(_unread)
    result = await db.execute(
        query.order_by(Notification.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result.scalars()],
        total=total,
        unread_count=unread_count,
        page=page,
        page_size=page_size,
    )


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(
    notification_id: UUID,
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    # Someone else's notification is reported as missing
    notification = await db.scalar(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == actor_id,
        )
    )
    if notification is None:
        raise NotFoundError("Notification", str(notification_id))

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_notifications_read(
    actor_id: Annotated[UUID, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    await db.execute(
        update(Notification)
        .where(Notification.user_id == actor_id, _unread)
        .values(is_read=True, read_at=utcnow())
    )
