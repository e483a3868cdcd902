from __future__ import annotations

import random

import pytest

from src.crew_attendance.crew_attendance.attendance.model import AttendanceEvent
from src.crew_attendance.crew_attendance.core.enums import MemberStatus, Role, StatsMode
from src.crew_attendance.crew_attendance.core.exceptions import CrewNotFoundError, ValidationError
from src.crew_attendance.crew_attendance.stats import calculator as calc
from src.crew_attendance.crew_attendance.stats.service import AdminStatsService, StatsWindows, parse_mode


def build_service(crews, events, now, mode=StatsMode.OPTIMIZED):
    return AdminStatsService(events, crews, default_mode=mode, clock=lambda: now)


def test_known_month_metrics(crew_repo, attendance_repo, make_event, fakes, fixed_now):
    crew_repo.add_member("crew-1", "u4", status=MemberStatus.INACTIVE)
    crew_repo.add_member("crew-1", "u5", joined_at=fakes.utc(2025, 6, 10))
    for e in [
        make_event("u1", fakes.utc(2025, 5, 12, 7)),
        make_event("u2", fakes.utc(2025, 5, 13, 7)),
        make_event("u1", fakes.utc(2025, 6, 2, 7)),
        make_event("u2", fakes.utc(2025, 6, 2, 7)),
        make_event("u1", fakes.utc(2025, 6, 3, 7), is_host=True, location="Old Track"),
        make_event("u4", fakes.utc(2025, 6, 4, 7)),
        make_event("u3", fakes.utc(2025, 6, 18, 7), is_host=True),
    ]:
        attendance_repo.add(e)

    stats = build_service(crew_repo, attendance_repo, fixed_now).compute_admin_stats(crew_id="crew-1")

    assert (stats.year, stats.month) == (2025, 6)
    assert stats.total_members == 6
    assert stats.total_active_members == 5
    assert stats.new_members_this_month == 1
    assert stats.today_attendee_count == 1
    assert stats.today_meeting_count == 1
    assert stats.week_attendee_count == 1
    assert stats.monthly_event_count == 5
    assert stats.monthly_event_count_change == 150
    assert stats.monthly_meeting_count == 2
    assert stats.monthly_participant_count == 4
    assert stats.monthly_host_count == 2
    # May: two events, no hosts, participants u1 and u2, nobody joined.
    assert stats.monthly_meeting_count_change is None
    assert stats.monthly_participant_count_change == 100
    assert stats.monthly_host_count_change is None
    assert stats.new_members_this_month_change is None

    monday, tuesday, wednesday = stats.weekday_participation[:3]
    assert (monday.name, monday.attended_members, monday.participation_rate, monday.event_share) == (
        "Monday",
        2,
        40,
        50,
    )
    assert (tuesday.participation_rate, wednesday.participation_rate) == (20, 20)
    assert [w.weekday for w in stats.weekday_participation] == list(range(7))

    assert [(l.location, l.attendance_count, l.participation_rate) for l in stats.location_participation] == [
        ("Riverside Park", 3, 75),
        ("Old Track", 1, 25),
    ]

    assert stats.member_status.attended_members == 3
    assert stats.member_status.absent_members == 2
    assert (stats.attendance_rate, stats.ghost_rate) == (60, 40)


@pytest.mark.parametrize("mode", list(StatsMode))
def test_month_over_month_changes(crew_repo, attendance_repo, make_event, fakes, fixed_now, mode):
    crew_repo.add_member("crew-1", "u6", joined_at=fakes.utc(2025, 5, 20))
    crew_repo.add_member("crew-1", "u5", joined_at=fakes.utc(2025, 6, 1))
    crew_repo.add_member("crew-1", "u7", joined_at=fakes.utc(2025, 6, 17, 23))
    for e in [
        make_event("u1", fakes.utc(2025, 5, 5, 7), is_host=True),
        make_event("u2", fakes.utc(2025, 5, 5, 7)),
        make_event("u3", fakes.utc(2025, 5, 6, 7)),
        make_event("u1", fakes.utc(2025, 6, 2, 7), is_host=True),
        make_event("u1", fakes.utc(2025, 6, 9, 7), is_host=True),
        make_event("u2", fakes.utc(2025, 6, 9, 7)),
    ]:
        attendance_repo.add(e)

    stats = build_service(crew_repo, attendance_repo, fixed_now, mode).compute_admin_stats(crew_id="crew-1")

    assert (stats.monthly_event_count, stats.monthly_event_count_change) == (3, 0)
    assert (stats.monthly_meeting_count, stats.monthly_meeting_count_change) == (2, 100)
    # 2 vs 3 is -33.3, rounded half up.
    assert (stats.monthly_participant_count, stats.monthly_participant_count_change) == (2, -33)
    assert (stats.monthly_host_count, stats.monthly_host_count_change) == (1, 0)
    assert (stats.new_members_this_month, stats.new_members_this_month_change) == (2, 100)


def test_zero_members_and_no_events_is_all_zero(fakes, fixed_now):
    crews = fakes.CrewRepo()
    crews.add_crew("empty")

    for mode in StatsMode:
        stats = build_service(crews, fakes.AttendanceRepo(), fixed_now, mode).compute_admin_stats(crew_id="empty")

        assert stats.total_active_members == 0
        assert stats.monthly_event_count == 0
        assert stats.monthly_event_count_change is None
        assert stats.new_members_this_month_change is None
        assert stats.monthly_participant_count_change is None
        assert all(w.participation_rate == 0 and w.event_share == 0 for w in stats.weekday_participation)
        assert stats.location_participation == []
        assert (stats.attendance_rate, stats.ghost_rate) == (0, 0)


def _random_crew(fakes, seed):
    rng = random.Random(seed)
    crews = fakes.CrewRepo()
    crews.add_crew("c")
    for i in range(rng.randint(0, 12)):
        crews.add_member(
            "c",
            f"u{i}",
            role=Role.ADMIN if i == 0 else Role.MEMBER,
            status=MemberStatus.ACTIVE if rng.random() < 0.8 else MemberStatus.INACTIVE,
            joined_at=fakes.utc(2025, rng.randint(1, 7), rng.randint(1, 28)),
        )

    events = fakes.AttendanceRepo()
    event_id = 1
    for _ in range(rng.randint(0, 120)):
        events.add(
            make_random_event(fakes, rng, event_id, crew_id="c" if rng.random() < 0.9 else "other")
        )
        event_id += 1
    return crews, events


def make_random_event(fakes, rng, event_id, *, crew_id):
    return AttendanceEvent(
        event_id=event_id,
        user_id=f"u{rng.randint(0, 15)}",
        crew_id=crew_id,
        occurred_at=fakes.utc(2025, rng.randint(2, 7), rng.randint(1, 28), rng.randint(0, 23), rng.randint(0, 59)),
        location=rng.choice(["Riverside Park", "Old Track", "Harbor Loop", None]),
        exercise_type_id=1,
        is_host=rng.random() < 0.2,
    )


@pytest.mark.parametrize(
    "now,year,month",
    [
        ((2025, 6, 18, 9), 2025, 6),  # week inside the pulled span
        ((2025, 7, 1, 6), 2025, 6),  # week straddles the end of the span
        ((2025, 6, 18, 9), 2025, 3),  # week far outside the span
        ((2025, 3, 3, 0), 2025, 3),  # first Monday of the month, midnight
    ],
)
def test_naive_and_optimized_agree_on_random_data(fakes, now, year, month):
    for seed in range(60):
        crews, events = _random_crew(fakes, seed)
        when = fakes.utc(*now)
        naive = build_service(crews, events, when, StatsMode.NAIVE).compute_admin_stats(
            crew_id="c", year=year, month=month
        )
        optimized = build_service(crews, events, when, StatsMode.OPTIMIZED).compute_admin_stats(
            crew_id="c", year=year, month=month
        )
        assert naive == optimized, f"seed={seed}"


def test_optimized_mode_issues_fewer_store_queries(crew_repo, attendance_repo, make_event, fakes, fixed_now):
    attendance_repo.add(make_event("u1", fakes.utc(2025, 6, 2, 7)))

    build_service(crew_repo, attendance_repo, fixed_now, StatsMode.OPTIMIZED).compute_admin_stats(crew_id="crew-1")
    optimized_calls = len(attendance_repo.calls) + crew_repo.list_members_calls

    attendance_repo.calls.clear()
    crew_repo.list_members_calls = 0
    build_service(crew_repo, attendance_repo, fixed_now, StatsMode.NAIVE).compute_admin_stats(crew_id="crew-1")
    naive_calls = len(attendance_repo.calls) + crew_repo.list_members_calls

    assert optimized_calls == 2
    assert naive_calls > optimized_calls


def test_mode_override_and_validation(crew_repo, attendance_repo, fixed_now):
    service = build_service(crew_repo, attendance_repo, fixed_now)

    assert service.compute_admin_stats(crew_id="crew-1", mode="naive").month == 6
    with pytest.raises(ValidationError):
        service.compute_admin_stats(crew_id="crew-1", mode="turbo")
    with pytest.raises(ValidationError):
        service.compute_admin_stats(crew_id="crew-1", year=2025)
    with pytest.raises(ValidationError):
        service.compute_admin_stats(crew_id="crew-1", year=2025, month=13)
    with pytest.raises(CrewNotFoundError):
        service.compute_admin_stats(crew_id="missing")


def test_windows_cross_year_boundary(fakes):
    w = StatsWindows.build(year=2025, month=1, now=fakes.utc(2025, 1, 1, 12))

    assert w.previous_month == (fakes.utc(2024, 12, 1), fakes.utc(2025, 1, 1))
    assert w.week == (fakes.utc(2024, 12, 30), fakes.utc(2025, 1, 6))
    assert w.today == (fakes.utc(2025, 1, 1), fakes.utc(2025, 1, 2))


def test_rounding_and_change_helpers():
    assert calc.percent(1, 8) == 13  # 12.5 rounds half up
    assert calc.percent(1, 3) == 33
    assert calc.percent(5, 0) == 0
    assert calc.change_percentage(5, 0) is None
    assert calc.change_percentage(3, 4) == -25
    assert calc.change_percentage(7, 8) == -12  # -12.5 rounds toward +inf
    assert parse_mode("OPTIMIZED") == StatsMode.OPTIMIZED
