from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import days_in_month, utc_day
from ..common.validators import require_year_month
from ..core.constants import OTHER_LABEL, UNKNOWN_LOCATION, UNKNOWN_NAME
from .model import CalendarSummary, DaySummary, DetailRow

logger = logging.getLogger(__name__)


def to_detail_row(e: AttendanceEvent) -> DetailRow:
    return DetailRow(
        event_id=e.event_id,
        user_id=e.user_id,
        user_name=e.user_name or UNKNOWN_NAME,
        occurred_at=e.occurred_at,
        location=e.location or UNKNOWN_LOCATION,
        exercise_type=e.exercise_type_name or OTHER_LABEL,
        is_host=bool(e.is_host),
    )


def aggregate_month(year: Any, month: Any, events: Iterable[AttendanceEvent]) -> CalendarSummary:
    """Bucket events by UTC calendar day.

    Every day of the month gets a summary entry, zeroed when nothing happened.
    Events outside the month are skipped.
    """
    y, m = require_year_month(year, month)
    n_days = days_in_month(y, m)

    attendees = [0] * n_days
    hosts = [0] * n_days
    by_day: dict[date, list[AttendanceEvent]] = {}
    skipped = 0

    for e in events:
        day = utc_day(e.occurred_at)
        if day.year != y or day.month != m:
            skipped += 1
            continue
        attendees[day.day - 1] += 1
        if e.is_host:
            hosts[day.day - 1] += 1
        by_day.setdefault(day, []).append(e)

    if skipped:
        logger.debug("skipped %d events outside %04d-%02d", skipped, y, m)

    days = [
        DaySummary(date=date(y, m, d + 1), attendee_count=attendees[d], host_count=hosts[d])
        for d in range(n_days)
    ]
    # sorted() is stable: equal timestamps keep their input order.
    details = {
        day: [to_detail_row(e) for e in sorted(day_events, key=lambda e: e.occurred_at)]
        for day, day_events in sorted(by_day.items())
    }
    return CalendarSummary(year=y, month=m, days=days, details=details)
