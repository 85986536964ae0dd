"""Live booking updates over WebSocket.

A client opens the socket and sends ``{"msg_type": "INIT", "user_id": ...}``.
From then on it receives ``{"msg": "reload", ...}`` whenever one of its
bookings changes status and should re-fetch it over HTTP. While connected,
the actor's bookings are re-evaluated every ``live_sync_interval_seconds`` so
countdown deadlines flip promptly.
"""

import asyncio
import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PydanticValidationError

from partybook.api.deps import get_notification_channel
from partybook.config import settings
from partybook.database import get_db_context
from partybook.schemas.notification import LiveInitMessage, NotificationEvent
from partybook.services.notification_service import NotificationChannel
from partybook.services.sync_service import StatusSyncService, SyncScope

logger = logging.getLogger(__name__)

router = APIRouter()

# Pending reload signals per connection; older ones are dropped when full
LIVE_QUEUE_SIZE = 100


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue[NotificationEvent]) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.to_client_message())


async def _drain_client(websocket: WebSocket) -> None:
    """Consume client frames until it disconnects."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def _sync_actor(actor_id: UUID, channel: NotificationChannel, interval: float) -> None:
    scope = SyncScope.for_actor(actor_id)
    while True:
        try:
            async with get_db_context() as db:
                await StatusSyncService(db, channel).evaluate_due_transitions(scope)
        except Exception as e:
            logger.warning(f"Live status sync for actor {actor_id} failed: {e}")
        await asyncio.sleep(interval)


@router.websocket("/live")
async def live_updates(
    websocket: WebSocket,
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
) -> None:
    """Push reload signals to a connected actor."""
    await websocket.accept()

    try:
        init = LiveInitMessage.model_validate(await websocket.receive_json())
    except WebSocketDisconnect:
        return
    except (PydanticValidationError, ValueError):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    actor_id = init.user_id
    queue: asyncio.Queue[NotificationEvent] = asyncio.Queue(maxsize=LIVE_QUEUE_SIZE)

    def enqueue(event: NotificationEvent) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(event)

    unsubscribe = channel.subscribe(actor_id, enqueue)
    logger.info(f"Live connection opened for actor {actor_id}")

    tasks = [
        asyncio.create_task(_forward_events(websocket, queue)),
        asyncio.create_task(_drain_client(websocket)),
    ]
    if settings.live_sync_interval_seconds > 0:
        tasks.append(
            asyncio.create_task(
                _sync_actor(actor_id, channel, settings.live_sync_interval_seconds)
            )
        )

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        unsubscribe()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Live connection closed for actor {actor_id}")
