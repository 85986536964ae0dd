"""Countdown text for booking deadlines.

Used for the confirmation timer (created_at + 2 days), the cancellation
cut-off (event_start - 14 days) and the time left until the event.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from partybook.utils.dates import as_utc, utcnow

TIME_EXCEEDED_TEXT = "Time limit exceeded"


@dataclass(frozen=True)
class RemainingTime:
    """Result of a countdown computation."""

    text: str
    elapsed: bool
    duration: timedelta


def format_duration(duration: timedelta) -> str:
    """Render a positive duration as e.g. ``1d 0h 3m 9s`` or ``5m 12s``.

    Units start at the largest non-zero one; seconds are always shown.
    """
    total_seconds = int(duration.total_seconds())
    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    parts: list[str] = []
    if days:
        parts.append(f"{days}d")
    if parts or hours:
        parts.append(f"{hours}h")
    if parts or minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def remaining(
    reference: datetime,
    offset_days: int,
    now: datetime | None = None,
) -> RemainingTime:
    """Time left until ``reference + offset_days``.

    Args:
        reference: Anchor instant (booking creation or event start)
        offset_days: Days added to the anchor, negative for cut-offs before it
        now: Current instant, defaults to the wall clock

    Returns:
        RemainingTime: elapsed is True once the target is not in the future
    """
    now = as_utc(now) if now is not None else utcnow()
    target = as_utc(reference) + timedelta(days=offset_days)

    if target <= now:
        return RemainingTime(text=TIME_EXCEEDED_TEXT, elapsed=True, duration=timedelta(0))

    duration = target - now
    return RemainingTime(text=format_duration(duration), elapsed=False, duration=duration)
