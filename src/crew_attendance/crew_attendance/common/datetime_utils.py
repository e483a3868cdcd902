from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day(value: datetime) -> date:
    """Calendar day of a timestamp in the UTC reporting timezone."""
    return as_utc(value).date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """Half-open UTC window ``[first day 00:00, first day of next month 00:00)``."""
    next_year, next_month = shift_month(year, month, 1)
    return start_of_day(date(year, month, 1)), start_of_day(date(next_year, next_month, 1))


def day_window(day: date) -> tuple[datetime, datetime]:
    start = start_of_day(day)
    return start, start + timedelta(days=1)


def week_window(day: date) -> tuple[datetime, datetime]:
    """ISO week containing ``day``: Monday 00:00 UTC to the next Monday."""
    monday = day - timedelta(days=day.weekday())
    start = start_of_day(monday)
    return start, start + timedelta(days=7)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` means UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
