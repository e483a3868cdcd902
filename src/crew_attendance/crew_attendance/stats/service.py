from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import as_utc, day_window, month_window, shift_month, utc_now, week_window
from ..common.validators import require_year_month
from ..core.enums import StatsMode
from ..core.exceptions import ValidationError
from ..crews.repository import CrewRepository
from ..crews.service import CrewAccessService
from . import calculator as calc
from .model import AdminStats

logger = logging.getLogger(__name__)

Window = tuple[datetime, datetime]


@dataclass(frozen=True)
class StatsWindows:
    """All UTC windows one stats request looks at."""

    today: Window
    week: Window
    month: Window
    previous_month: Window

    @classmethod
    def build(cls, *, year: int, month: int, now: datetime) -> "StatsWindows":
        prev_year, prev_month = shift_month(year, month, -1)
        today = as_utc(now).date()
        return cls(
            today=day_window(today),
            week=week_window(today),
            month=month_window(year, month),
            previous_month=month_window(prev_year, prev_month),
        )


def parse_mode(value: Any) -> StatsMode:
    if isinstance(value, StatsMode):
        return value
    try:
        return StatsMode(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"mode must be 'naive' or 'optimized', got {value!r}")


class AdminStatsService:
    """Use case: crew KPIs for the admin dashboard and analysis page.

    ``StatsMode.NAIVE`` runs one store query per metric; ``StatsMode.OPTIMIZED``
    pulls the roster and the events once and derives every metric in memory.
    Both return the same AdminStats for the same store contents.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        crews: CrewRepository,
        *,
        default_mode: StatsMode = StatsMode.OPTIMIZED,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._attendance = attendance
        self._crews = crews
        self._access = CrewAccessService(crews)
        self._default_mode = parse_mode(default_mode)
        self._clock = clock

    def compute_admin_stats(
        self,
        *,
        crew_id: str,
        year: Any = None,
        month: Any = None,
        mode: Any = None,
        now: Optional[datetime] = None,
    ) -> AdminStats:
        now = as_utc(now or self._clock())
        if year is None and month is None:
            y, m = now.year, now.month
        elif year is None or month is None:
            raise ValidationError("year and month must be given together")
        else:
            y, m = require_year_month(year, month)

        selected = self._default_mode if mode is None else parse_mode(mode)
        crew = self._access.require_crew(crew_id)
        windows = StatsWindows.build(year=y, month=m, now=now)

        if selected == StatsMode.NAIVE:
            stats = self._compute_naive(crew.crew_id, y, m, windows)
        else:
            stats = self._compute_optimized(crew.crew_id, y, m, windows)

        logger.debug("admin stats for crew %s %04d-%02d computed in %s mode", crew.crew_id, y, m, selected.value)
        return stats

    def _compute_naive(self, crew_id: str, year: int, month: int, w: StatsWindows) -> AdminStats:
        repo = self._attendance

        total_members = len(self._crews.list_members(crew_id))
        active_ids = calc.active_member_ids(self._crews.list_members(crew_id))
        new_members = calc.joined_between(self._crews.list_members(crew_id), *w.month)
        previous_new_members = calc.joined_between(self._crews.list_members(crew_id), *w.previous_month)

        today_attendees = len(repo.distinct_user_ids(crew_id=crew_id, start=w.today[0], end=w.today[1]))
        today_meetings = repo.count_for_crew(crew_id=crew_id, start=w.today[0], end=w.today[1], host_only=True)
        week_attendees = len(repo.distinct_user_ids(crew_id=crew_id, start=w.week[0], end=w.week[1]))

        monthly_events = repo.count_for_crew(crew_id=crew_id, start=w.month[0], end=w.month[1])
        previous_events = repo.count_for_crew(crew_id=crew_id, start=w.previous_month[0], end=w.previous_month[1])
        monthly_meetings = repo.count_for_crew(crew_id=crew_id, start=w.month[0], end=w.month[1], host_only=True)
        monthly_participants = len(repo.distinct_user_ids(crew_id=crew_id, start=w.month[0], end=w.month[1]))
        monthly_hosts = len(
            repo.distinct_user_ids(crew_id=crew_id, start=w.month[0], end=w.month[1], host_only=True)
        )

        prev = w.previous_month
        previous_meetings = repo.count_for_crew(crew_id=crew_id, start=prev[0], end=prev[1], host_only=True)
        previous_participants = len(repo.distinct_user_ids(crew_id=crew_id, start=prev[0], end=prev[1]))
        previous_hosts = len(repo.distinct_user_ids(crew_id=crew_id, start=prev[0], end=prev[1], host_only=True))

        weekday_events = calc.of_members(
            repo.list_for_crew(crew_id=crew_id, start=w.month[0], end=w.month[1]), active_ids
        )
        location_events = calc.of_members(
            repo.list_for_crew(crew_id=crew_id, start=w.month[0], end=w.month[1]), active_ids
        )
        attended_active = [
            uid for uid in repo.distinct_user_ids(crew_id=crew_id, start=w.month[0], end=w.month[1]) if uid in active_ids
        ]

        return AdminStats(
            crew_id=crew_id,
            year=year,
            month=month,
            total_members=total_members,
            total_active_members=len(active_ids),
            new_members_this_month=new_members,
            new_members_this_month_change=calc.change_percentage(new_members, previous_new_members),
            today_attendee_count=today_attendees,
            today_meeting_count=today_meetings,
            week_attendee_count=week_attendees,
            monthly_event_count=monthly_events,
            monthly_event_count_change=calc.change_percentage(monthly_events, previous_events),
            monthly_meeting_count=monthly_meetings,
            monthly_meeting_count_change=calc.change_percentage(monthly_meetings, previous_meetings),
            monthly_participant_count=monthly_participants,
            monthly_participant_count_change=calc.change_percentage(monthly_participants, previous_participants),
            monthly_host_count=monthly_hosts,
            monthly_host_count_change=calc.change_percentage(monthly_hosts, previous_hosts),
            weekday_participation=calc.weekday_participation(weekday_events, len(active_ids)),
            location_participation=calc.location_participation(location_events),
            member_status=calc.member_attendance_status(len(attended_active), len(active_ids)),
        )

    def _compute_optimized(self, crew_id: str, year: int, month: int, w: StatsWindows) -> AdminStats:
        members = self._crews.list_members(crew_id)
        active_ids = calc.active_member_ids(members)

        span = (w.previous_month[0], w.month[1])
        events = list(self._attendance.list_for_crew(crew_id=crew_id, start=span[0], end=span[1]))
        if span[0] <= w.week[0] and w.week[1] <= span[1]:
            week_events = calc.in_window(events, *w.week)
        else:
            week_events = list(self._attendance.list_for_crew(crew_id=crew_id, start=w.week[0], end=w.week[1]))

        today_events = calc.in_window(week_events, *w.today)
        month_events = calc.in_window(events, *w.month)
        previous_events = calc.in_window(events, *w.previous_month)
        month_hosts = calc.hosts_only(month_events)
        previous_hosts = calc.hosts_only(previous_events)
        active_month_events = calc.of_members(month_events, active_ids)

        monthly_events = len(month_events)
        new_members = calc.joined_between(members, *w.month)
        participants = calc.unique_users(month_events)
        hosts = calc.unique_users(month_hosts)
        return AdminStats(
            crew_id=crew_id,
            year=year,
            month=month,
            total_members=len(members),
            total_active_members=len(active_ids),
            new_members_this_month=new_members,
            new_members_this_month_change=calc.change_percentage(
                new_members, calc.joined_between(members, *w.previous_month)
            ),
            today_attendee_count=calc.unique_users(today_events),
            today_meeting_count=len(calc.hosts_only(today_events)),
            week_attendee_count=calc.unique_users(week_events),
            monthly_event_count=monthly_events,
            monthly_event_count_change=calc.change_percentage(monthly_events, len(previous_events)),
            monthly_meeting_count=len(month_hosts),
            monthly_meeting_count_change=calc.change_percentage(len(month_hosts), len(previous_hosts)),
            monthly_participant_count=participants,
            monthly_participant_count_change=calc.change_percentage(participants, calc.unique_users(previous_events)),
            monthly_host_count=hosts,
            monthly_host_count_change=calc.change_percentage(hosts, calc.unique_users(previous_hosts)),
            weekday_participation=calc.weekday_participation(active_month_events, len(active_ids)),
            location_participation=calc.location_participation(active_month_events),
            member_status=calc.member_attendance_status(calc.unique_users(active_month_events), len(active_ids)),
        )
