from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from src.crew_attendance.crew_attendance.attendance.model import AttendanceEvent
from src.crew_attendance.crew_attendance.core.enums import MemberStatus, Role
from src.crew_attendance.crew_attendance.core.exceptions import DuplicateKeyError
from src.crew_attendance.crew_attendance.crews.model import Crew, CrewLocation, CrewMember


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FakeCrewRepo:
    def __init__(self):
        self.crews: dict[str, Crew] = {}
        self.members: dict[tuple[str, str], CrewMember] = {}
        self.locations: dict[int, CrewLocation] = {}
        self.list_members_calls = 0

    def add_crew(self, crew_id, name="Morning Runners"):
        self.crews[crew_id] = Crew(crew_id=crew_id, name=name)
        return self.crews[crew_id]

    def add_member(self, crew_id, user_id, *, role=Role.MEMBER, status=MemberStatus.ACTIVE, joined_at=None):
        self.members[(crew_id, user_id)] = CrewMember(
            crew_id=crew_id,
            user_id=user_id,
            role=role,
            status=status,
            joined_at=joined_at or utc(2024, 1, 1),
        )

    def add_location(self, location_id, crew_id, name, *, is_active=True):
        self.locations[location_id] = CrewLocation(
            location_id=location_id, crew_id=crew_id, name=name, is_active=is_active
        )

    def get_by_id(self, crew_id):
        return self.crews.get(crew_id)

    def get_member(self, *, crew_id, user_id):
        return self.members.get((crew_id, user_id))

    def list_members(self, crew_id):
        self.list_members_calls += 1
        return [m for (cid, _), m in self.members.items() if cid == crew_id]

    def get_location(self, location_id):
        return self.locations.get(int(location_id))


class FakeAttendanceRepo:
    """Event store with the per-user-per-UTC-day unique key over live events."""

    def __init__(self, events=()):
        self.events: dict[int, AttendanceEvent] = {}
        self.names: dict[str, str] = {}
        self.calls: list[str] = []
        self._next_id = 1
        for e in events:
            self.add(e)

    def add(self, event: AttendanceEvent):
        self.events[event.event_id] = event
        self._next_id = max(self._next_id, event.event_id + 1)

    def _live(self, crew_id, start, end, host_only):
        rows = [
            e
            for e in self.events.values()
            if e.crew_id == crew_id
            and e.deleted_at is None
            and start <= e.occurred_at < end
            and (e.is_host or not host_only)
        ]
        return sorted(rows, key=lambda e: (e.occurred_at, e.event_id))

    def list_for_crew(self, *, crew_id, start, end, host_only=False):
        self.calls.append("list_for_crew")
        return self._live(crew_id, start, end, host_only)

    def count_for_crew(self, *, crew_id, start, end, host_only=False):
        self.calls.append("count_for_crew")
        return len(self._live(crew_id, start, end, host_only))

    def distinct_user_ids(self, *, crew_id, start, end, host_only=False):
        self.calls.append("distinct_user_ids")
        seen: list[str] = []
        for e in self._live(crew_id, start, end, host_only):
            if e.user_id not in seen:
                seen.append(e.user_id)
        return seen

    def insert_many(self, events):
        self.calls.append("insert_many")
        taken = {
            (e.user_id, e.crew_id, e.occurred_at.date()) for e in self.events.values() if e.deleted_at is None
        }
        for new in events:
            key = (new.user_id, new.crew_id, new.occurred_at.date())
            if key in taken:
                raise DuplicateKeyError(f"Duplicate entry for {key}")
            taken.add(key)

        ids = []
        for new in events:
            eid = self._next_id
            self._next_id += 1
            self.events[eid] = AttendanceEvent(
                event_id=eid,
                user_id=new.user_id,
                crew_id=new.crew_id,
                occurred_at=new.occurred_at,
                location=new.location,
                exercise_type_id=new.exercise_type_id,
                is_host=new.is_host,
                user_name=self.names.get(new.user_id),
            )
            ids.append(eid)
        return ids

    def get_by_id(self, event_id):
        return self.events.get(int(event_id))

    def set_deleted_at(self, *, event_id, deleted_at):
        e = self.events.get(int(event_id))
        if not e:
            return False
        if deleted_at is None:
            key = (e.user_id, e.crew_id, e.occurred_at.date())
            for other in self.events.values():
                if other.event_id != e.event_id and other.deleted_at is None and (
                    (other.user_id, other.crew_id, other.occurred_at.date()) == key
                ):
                    raise DuplicateKeyError(f"Duplicate entry for {key}")
        self.events[e.event_id] = replace(e, deleted_at=deleted_at)
        return True


@pytest.fixture
def crew_repo():
    repo = FakeCrewRepo()
    repo.add_crew("crew-1")
    repo.add_member("crew-1", "admin-1", role=Role.ADMIN)
    repo.add_member("crew-1", "u1")
    repo.add_member("crew-1", "u2")
    repo.add_member("crew-1", "u3")
    repo.add_location(10, "crew-1", "Riverside Park")
    repo.add_location(11, "crew-1", "Old Track", is_active=False)
    repo.add_crew("crew-2", name="Night Cyclists")
    repo.add_location(20, "crew-2", "Harbor Loop")
    return repo


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def fixed_now():
    return utc(2025, 6, 18, 9, 30)


@pytest.fixture
def make_event():
    counter = {"next": 1000}

    def _make(user_id, occurred_at, *, crew_id="crew-1", is_host=False, location="Riverside Park", name=None, **extra):
        counter["next"] += 1
        return AttendanceEvent(
            event_id=extra.pop("event_id", counter["next"]),
            user_id=user_id,
            crew_id=crew_id,
            occurred_at=occurred_at,
            location=location,
            exercise_type_id=1,
            is_host=is_host,
            user_name=name,
            **extra,
        )

    return _make


@pytest.fixture
def fakes():
    return SimpleNamespace(CrewRepo=FakeCrewRepo, AttendanceRepo=FakeAttendanceRepo, utc=utc)
