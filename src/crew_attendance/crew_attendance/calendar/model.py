from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class DaySummary:
    date: date
    attendee_count: int
    host_count: int


@dataclass(frozen=True)
class DetailRow:
    """One attendee on the day drill-down."""

    event_id: int
    user_id: str
    user_name: str
    occurred_at: datetime
    location: str
    exercise_type: str
    is_host: bool


@dataclass(frozen=True)
class CalendarSummary:
    """Month view: one ``DaySummary`` per calendar day plus per-day details.

    ``details`` only has keys for days with at least one event.
    """

    year: int
    month: int
    days: list[DaySummary]
    details: dict[date, list[DetailRow]]

    def day(self, value: date) -> DaySummary:
        return self.days[value.day - 1]
