"""Notification channel and booking notifications.

Two kinds of notification leave the engine when a booking changes status:
- Live reload signals, fanned out to observers subscribed by actor id.
  Delivery is best effort and at most once; observers that miss one catch up
  on the next status sweep or page load.
- In-app notifications for the requester (and the performer for new
  requests), persisted so they can be listed later.

With the redis backend, publish() goes through a Redis pub/sub channel so
events raised by Celery workers reach observers connected to web processes.
The relay reconnects with exponential backoff when Redis goes away.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partybook.config import settings
from partybook.domain.booking_state import BookingStatus
from partybook.models.booking import Booking
from partybook.models.notification import Notification
from partybook.schemas.notification import NotificationEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[NotificationEvent], Awaitable[None] | None]


class NotificationChannel:
    """Publish/subscribe of reload signals keyed by actor id."""

    def __init__(
        self,
        backend: str | None = None,
        redis_url: str | None = None,
        retry_seconds: float = 1.0,
        max_retry_seconds: float = 30.0,
    ) -> None:
        self.backend = backend or settings.notification_backend
        self.redis_url = redis_url or settings.redis_url
        # Relay reconnect backoff, doubled per failure up to the maximum
        self.retry_seconds = retry_seconds
        self.max_retry_seconds = max_retry_seconds
        self._retry_delay = retry_seconds
        self.channel_name = settings.notification_channel_name
        self._subscribers: dict[UUID, list[EventHandler]] = {}
        self._redis: redis.Redis | None = None
        self._listener: asyncio.Task | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    def subscribe(self, actor_id: UUID, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for an actor's events.

        Returns:
            Callable that removes the handler again
        """
        self._subscribers.setdefault(actor_id, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(actor_id, [])
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                self._subscribers.pop(actor_id, None)

        return unsubscribe

    def subscriber_count(self, actor_id: UUID) -> int:
        return len(self._subscribers.get(actor_id, []))

    async def publish(self, actor_id: UUID, event: NotificationEvent) -> None:
        """Signal an actor. Never raises."""
        if event.actor_id != actor_id:
            event = event.model_copy(update={"actor_id": actor_id})

        if self.backend == "redis":
            try:
                redis_client = await self.get_redis()
                await redis_client.publish(self.channel_name, event.model_dump_json())
                return
            except redis.RedisError as e:
                logger.warning(f"Redis publish failed, delivering locally only: {e}")

        await self.dispatch_local(event)

    async def dispatch_local(self, event: NotificationEvent) -> int:
        """Deliver to in-process subscribers.

        Returns:
            int: Number of handlers that accepted the event
        """
        delivered = 0
        for handler in list(self._subscribers.get(event.actor_id, [])):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.warning(f"Notification handler for actor {event.actor_id} failed: {e}")
        return delivered

    async def start(self) -> None:
        """Start relaying Redis events to local subscribers."""
        if self.backend != "redis" or self._listener is not None:
            return
        self._listener = asyncio.create_task(self._listen())

    async def stop(self) -> None:
        """Stop the relay and close the Redis connection."""
        if self._listener:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Redis relay had already stopped with an error: {e}")
            self._listener = None
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def _listen(self) -> None:
        """Relay until cancelled, reconnecting with backoff when Redis fails."""
        self._retry_delay = self.retry_seconds
        while True:
            try:
                await self._relay()
            except redis.RedisError as e:
                logger.warning(
                    f"Redis relay on {self.channel_name} lost: {e}; "
                    f"reconnecting in {self._retry_delay:.1f}s"
                )
            await asyncio.sleep(self._retry_delay)
            self._retry_delay = min(self._retry_delay * 2, self.max_retry_seconds)

    async def _relay(self) -> None:
        redis_client = await self.get_redis()
        pubsub = redis_client.pubsub()
        try:
            await pubsub.subscribe(self.channel_name)
            self._retry_delay = self.retry_seconds
            logger.info(f"Relaying booking events from Redis channel {self.channel_name}")
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    event = NotificationEvent.model_validate_json(message["data"])
                except PydanticValidationError as e:
                    logger.warning(f"Dropping malformed booking event: {e}")
                    continue
                await self.dispatch_local(event)
        finally:
            await pubsub.aclose()


class BookingNotifier:
    """Side effects of a booking status change."""

    # Notification types
    BOOKING_REQUEST = "booking-request"
    BOOKING_CONFIRMED = "booking-confirmed"
    BOOKING_NOT_CONFIRMED = "booking-not-confirmed"
    BOOKING_REJECTED = "booking-rejected"
    BOOKING_CANCELLED = "booking-cancelled"
    BOOKING_ENDED = "booking-ended"
    BOOKING_STATUS_CHANGE = "booking-status-change"

    RELOAD_REASON = "booking_status_changed"

    def __init__(self, db: AsyncSession, channel: NotificationChannel | None = None) -> None:
        self.db = db
        self.channel = channel or notification_channel

    async def booking_status_changed(self, booking: Booking) -> None:
        """Notify both sides of a booking about its current status.

        Failures are logged and swallowed; the status change itself is
        already committed.
        """
        booking_id = booking.id
        status = BookingStatus(booking.status)
        actors = (booking.requester_id, booking.provider_id)

        await self._create_in_app_notifications(booking)

        for actor_id in actors:
            event = NotificationEvent(
                actor_id=actor_id,
                reason=self.RELOAD_REASON,
                booking_id=booking_id,
                status=status,
            )
            await self.channel.publish(actor_id, event)

    async def _create_in_app_notifications(self, booking: Booking) -> None:
        booking_id = booking.id
        notifications = self._build_notifications(booking)
        if not notifications:
            return
        try:
            self.db.add_all(notifications)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"Could not store notifications for booking {booking_id}: {e}")

    def _build_notifications(self, booking: Booking) -> list[Notification]:
        status = BookingStatus(booking.status)

        if status == BookingStatus.PENDING:
            return [
                Notification(
                    user_id=booking.provider_id,
                    booking_id=booking.id,
                    notification_type=self.BOOKING_REQUEST,
                    message="You have a new booking request. Confirm or reject it within 48 hours.",
                    on_click_path="/app/dj/bookings",
                )
            ]

        if status == BookingStatus.UNCONFIRMED:
            notification_type = self.BOOKING_NOT_CONFIRMED
            message = "The DJ did not confirm your booking within 48 hours. The booking has expired."
        elif status == BookingStatus.CONFIRMED:
            notification_type = self.BOOKING_CONFIRMED
            message = (
                "The DJ confirmed your booking. Get in touch to settle the details. "
                "Have a great party!"
            )
        elif status == BookingStatus.REJECTED:
            notification_type = self.BOOKING_REJECTED
            message = "The DJ rejected your booking. We're sorry about that."
        elif status == BookingStatus.CANCELLED:
            notification_type = self.BOOKING_CANCELLED
            message = "Your booking has been cancelled."
            if booking.cancellation_reason:
                message = f"{message} Reason: {booking.cancellation_reason}"
        elif status == BookingStatus.ENDED:
            return [
                Notification(
                    user_id=booking.requester_id,
                    booking_id=booking.id,
                    notification_type=self.BOOKING_ENDED,
                    message=f"Your booking {booking.id} has ended. Don't forget to review your DJ!",
                    on_click_path=f"/app/book-dj/{booking.provider_id}",
                )
            ]
        else:
            notification_type = self.BOOKING_STATUS_CHANGE
            message = f"Booking status was updated to: {status.value}"

        return [
            Notification(
                user_id=booking.requester_id,
                booking_id=booking.id,
                notification_type=notification_type,
                message=message,
                on_click_path="/app/bookings",
            )
        ]


# Singleton instance
notification_channel = NotificationChannel()
