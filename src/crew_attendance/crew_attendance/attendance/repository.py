from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEvent, NewAttendanceEvent


class AttendanceRepository(Protocol):
    """Event store contract. Windows are half-open ``[start, end)`` in UTC and
    soft-deleted events are never returned or counted."""

    def list_for_crew(
        self,
        *,
        crew_id: str,
        start: datetime,
        end: datetime,
        host_only: bool = False,
    ) -> Sequence[AttendanceEvent]:
        """Events ordered by ``occurred_at`` then id."""

        raise NotImplementedError

    def count_for_crew(self, *, crew_id: str, start: datetime, end: datetime, host_only: bool = False) -> int:
        raise NotImplementedError

    def distinct_user_ids(
        self,
        *,
        crew_id: str,
        start: datetime,
        end: datetime,
        host_only: bool = False,
    ) -> Sequence[str]:
        raise NotImplementedError

    def insert_many(self, events: Sequence[NewAttendanceEvent]) -> list[int]:
        """Insert all events in one transaction and return their ids in order.

        Raises DuplicateKeyError (and writes nothing) if any event collides
        with the one-event-per-user-per-day key.
        """

        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        """Includes soft-deleted events."""

        raise NotImplementedError

    def set_deleted_at(self, *, event_id: int, deleted_at: Optional[datetime]) -> bool:
        """Soft-delete or restore. Only live events hold the per-day key, so a
        restore raises DuplicateKeyError if the user was re-recorded that day.
        """

        raise NotImplementedError
