"""Pure metric functions shared by both admin stats modes.

Percentages are integers rounded half-up; a zero denominator yields 0.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Collection, Iterable, Optional, Sequence

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import as_utc, utc_day
from ..core.constants import OTHER_LABEL
from ..crews.model import CrewMember
from .model import LocationParticipation, MemberAttendanceStatus, WeekdayParticipation

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part * 100 / whole)


def change_percentage(current: int, previous: int) -> Optional[int]:
    if previous == 0:
        return None
    return round_half_up((current - previous) * 100 / previous)


def in_window(events: Iterable[AttendanceEvent], start: datetime, end: datetime) -> list[AttendanceEvent]:
    return [e for e in events if start <= as_utc(e.occurred_at) < end]


def of_members(events: Iterable[AttendanceEvent], member_ids: Collection[str]) -> list[AttendanceEvent]:
    return [e for e in events if e.user_id in member_ids]


def hosts_only(events: Iterable[AttendanceEvent]) -> list[AttendanceEvent]:
    return [e for e in events if e.is_host]


def unique_users(events: Iterable[AttendanceEvent]) -> int:
    return len({e.user_id for e in events})


def active_member_ids(members: Iterable[CrewMember]) -> set[str]:
    return {m.user_id for m in members if m.is_active}


def joined_between(members: Iterable[CrewMember], start: datetime, end: datetime) -> int:
    return sum(1 for m in members if start <= as_utc(m.joined_at) < end)


def weekday_participation(events: Sequence[AttendanceEvent], total_active_members: int) -> list[WeekdayParticipation]:
    """Monday..Sunday buckets over events of active members."""
    attended: list[set[str]] = [set() for _ in range(7)]
    counts = [0] * 7
    for e in events:
        wd = utc_day(e.occurred_at).weekday()
        attended[wd].add(e.user_id)
        counts[wd] += 1

    total_events = len(events)
    return [
        WeekdayParticipation(
            weekday=wd,
            name=WEEKDAY_NAMES[wd],
            attended_members=len(attended[wd]),
            participation_rate=percent(len(attended[wd]), total_active_members),
            attendance_count=counts[wd],
            event_share=percent(counts[wd], total_events),
        )
        for wd in range(7)
    ]


def location_participation(events: Sequence[AttendanceEvent]) -> list[LocationParticipation]:
    counts: dict[str, int] = {}
    for e in events:
        label = e.location or OTHER_LABEL
        counts[label] = counts.get(label, 0) + 1

    total = len(events)
    rows = [
        LocationParticipation(location=label, attendance_count=n, participation_rate=percent(n, total))
        for label, n in counts.items()
    ]
    rows.sort(key=lambda r: (-r.participation_rate, -r.attendance_count, r.location))
    return rows


def member_attendance_status(attended_members: int, total_active_members: int) -> MemberAttendanceStatus:
    if total_active_members == 0:
        return MemberAttendanceStatus(
            total_active_members=0,
            attended_members=0,
            attendance_rate=0,
            absent_members=0,
            ghost_rate=0,
        )

    absent = total_active_members - attended_members
    return MemberAttendanceStatus(
        total_active_members=total_active_members,
        attended_members=attended_members,
        attendance_rate=percent(attended_members, total_active_members),
        absent_members=absent,
        ghost_rate=percent(absent, total_active_members),
    )
