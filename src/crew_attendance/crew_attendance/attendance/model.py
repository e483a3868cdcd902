from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceEvent:
    """One recorded participation of a member in a crew activity.

    ``user_name``, ``avatar_url`` and ``exercise_type_name`` are joined at read
    time; ``location`` was denormalized from the location catalog at write time.
    """

    event_id: int
    user_id: str
    crew_id: str
    occurred_at: datetime
    location: Optional[str]
    exercise_type_id: int
    is_host: bool
    user_name: Optional[str] = None
    avatar_url: Optional[str] = None
    exercise_type_name: Optional[str] = None
    deleted_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAttendanceEvent:
    """Insert payload; the store assigns the id."""

    user_id: str
    crew_id: str
    occurred_at: datetime
    location: str
    exercise_type_id: int
    is_host: bool = False
