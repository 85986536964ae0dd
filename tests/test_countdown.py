"""Tests for countdown text rendering."""

# ruff: noqa: S101

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from partybook.domain.countdown import TIME_EXCEEDED_TEXT, format_duration, remaining

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


def test_confirmation_countdown_mid_window():
    created_at = NOW - timedelta(days=1, hours=1, minutes=3, seconds=4)

    result = remaining(created_at, 2, NOW)

    assert result.text == "22h 56m 56s"
    assert not result.elapsed
    assert result.duration == timedelta(hours=22, minutes=56, seconds=56)


def test_cancellation_countdown_is_elapsed_inside_cutoff():
    event_start = NOW + timedelta(days=10)

    result = remaining(event_start, -14, NOW)

    assert result.text == TIME_EXCEEDED_TEXT
    assert result.elapsed
    assert result.duration == timedelta(0)


def test_countdown_reaching_target_exactly_is_elapsed():
    result = remaining(NOW - timedelta(days=2), 2, NOW)

    assert result.elapsed
    assert result.text == "Time limit exceeded"


def test_countdown_with_days_left():
    result = remaining(NOW + timedelta(days=16, seconds=9, minutes=3), -14, NOW)

    assert result.text == "2d 0h 3m 9s"


def test_naive_datetimes_are_treated_as_utc():
    naive_created = (NOW - timedelta(hours=47)).replace(tzinfo=None)

    result = remaining(naive_created, 2, NOW)

    assert result.text == "1h 0m 0s"


@pytest.mark.parametrize(
    ("duration", "expected"),
    [
        (timedelta(seconds=5), "5s"),
        (timedelta(minutes=5, seconds=12), "5m 12s"),
        (timedelta(hours=3), "3h 0m 0s"),
        (timedelta(days=1, hours=0, minutes=3, seconds=9), "1d 0h 3m 9s"),
        (timedelta(seconds=59, microseconds=999_999), "59s"),
        (timedelta(0), "0s"),
    ],
)
def test_format_duration(duration, expected):
    assert format_duration(duration) == expected


def test_confirmation_countdown_one_second_past_deadline():
    created_at = NOW - timedelta(days=2, seconds=1)

    result = remaining(created_at, 2, NOW)

    assert result.elapsed
    assert result.text == TIME_EXCEEDED_TEXT


def test_cancellation_countdown_one_second_before_cutoff():
    event_start = NOW + timedelta(days=14, seconds=1)

    result = remaining(event_start, -14, NOW)

    assert not result.elapsed
    assert result.text == "1s"
