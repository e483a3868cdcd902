from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WeekdayParticipation:
    """One weekday bucket (0=Monday .. 6=Sunday) of the target month."""

    weekday: int
    name: str
    attended_members: int
    participation_rate: int
    attendance_count: int
    event_share: int


@dataclass(frozen=True)
class LocationParticipation:
    location: str
    attendance_count: int
    participation_rate: int


@dataclass(frozen=True)
class MemberAttendanceStatus:
    total_active_members: int
    attended_members: int
    attendance_rate: int
    absent_members: int
    ghost_rate: int


@dataclass(frozen=True)
class AdminStats:
    crew_id: str
    year: int
    month: int

    total_members: int
    total_active_members: int
    new_members_this_month: int
    new_members_this_month_change: Optional[int]

    today_attendee_count: int
    today_meeting_count: int
    week_attendee_count: int

    monthly_event_count: int
    monthly_event_count_change: Optional[int]
    monthly_meeting_count: int
    monthly_meeting_count_change: Optional[int]
    monthly_participant_count: int
    monthly_participant_count_change: Optional[int]
    monthly_host_count: int
    monthly_host_count_change: Optional[int]

    weekday_participation: list[WeekdayParticipation]
    location_participation: list[LocationParticipation]
    member_status: MemberAttendanceStatus

    @property
    def attendance_rate(self) -> int:
        return self.member_status.attendance_rate

    @property
    def ghost_rate(self) -> int:
        return self.member_status.ghost_rate
