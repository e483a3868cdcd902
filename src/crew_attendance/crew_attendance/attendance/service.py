from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import utc_now
from ..common.validators import (
    require_non_empty,
    require_positive_id,
    require_timestamp,
    require_user_ids,
)
from ..core.constants import DEFAULT_EXERCISE_TYPE_ID
from ..core.exceptions import DuplicateAttendanceError, DuplicateKeyError, ValidationError
from ..crews.repository import CrewRepository
from ..crews.service import CrewAccessService
from .model import NewAttendanceEvent
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkRecordResult:
    created_count: int
    created_ids: list[int]


class AttendanceService:
    """Use case: admin-side writes to the attendance log."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        crews: CrewRepository,
        *,
        access: Optional[CrewAccessService] = None,
    ):
        self._attendance = attendance
        self._crews = crews
        self._access = access or CrewAccessService(crews)

    def record_bulk_attendance(
        self,
        *,
        crew_id: str,
        user_ids: Sequence[str],
        occurred_at: datetime | str,
        location_id: Any,
        acting_admin_id: Optional[str],
        exercise_type_id: int = DEFAULT_EXERCISE_TYPE_ID,
    ) -> BulkRecordResult:
        """Insert one event per user, all sharing timestamp and location.

        All-or-nothing: if any user already has an event that day the whole
        batch is rejected with DuplicateAttendanceError and nothing is written.
        """
        crew_id = require_non_empty(crew_id, "crewId")
        ids = require_user_ids(user_ids)
        when = require_timestamp(occurred_at, "attendanceTimestamp")
        loc_id = require_positive_id(location_id, "locationId")
        exercise_id = require_positive_id(exercise_type_id, "exerciseTypeId")

        self._access.require_crew(crew_id)
        self._access.require_admin(crew_id=crew_id, user_id=acting_admin_id)

        location = self._crews.get_location(loc_id)
        if not location or location.crew_id != crew_id or not location.is_active:
            raise ValidationError(f"Invalid location {loc_id} for crew {crew_id}")

        events = [
            NewAttendanceEvent(
                user_id=uid,
                crew_id=crew_id,
                occurred_at=when,
                location=location.name,
                exercise_type_id=exercise_id,
                is_host=False,
            )
            for uid in ids
        ]

        try:
            created_ids = self._attendance.insert_many(events)
        except DuplicateKeyError as e:
            logger.info("bulk attendance rejected for crew %s on %s: %s", crew_id, when.date(), e)
            raise DuplicateAttendanceError(
                "One or more users already have an attendance record on that day"
            ) from e

        logger.info("recorded %d attendance events for crew %s by %s", len(created_ids), crew_id, acting_admin_id)
        return BulkRecordResult(created_count=len(created_ids), created_ids=list(created_ids))

    def delete_event(self, *, event_id: Any, acting_admin_id: Optional[str], now: Optional[datetime] = None) -> None:
        """Soft delete: the event disappears from rankings, calendars and stats."""
        event = self._get_event_for_admin(event_id, acting_admin_id)
        if event.deleted_at is not None:
            raise ValidationError("Attendance record is already deleted")

        if not self._attendance.set_deleted_at(event_id=event.event_id, deleted_at=now or utc_now()):
            raise ValidationError("Deleting the attendance record failed")

    def restore_event(self, *, event_id: Any, acting_admin_id: Optional[str]) -> None:
        event = self._get_event_for_admin(event_id, acting_admin_id)
        if event.deleted_at is None:
            raise ValidationError("Attendance record is not deleted")

        try:
            restored = self._attendance.set_deleted_at(event_id=event.event_id, deleted_at=None)
        except DuplicateKeyError as e:
            logger.info("restore of attendance %s rejected: %s", event.event_id, e)
            raise DuplicateAttendanceError(
                "The user already has another attendance record on that day"
            ) from e
        if not restored:
            raise ValidationError("Restoring the attendance record failed")

    def _get_event_for_admin(self, event_id: Any, acting_admin_id: Optional[str]):
        ident = require_positive_id(event_id, "eventId")
        event = self._attendance.get_by_id(ident)
        if not event:
            raise ValidationError(f"Attendance record {ident} does not exist")
        self._access.require_admin(crew_id=event.crew_id, user_id=acting_admin_id)
        return event
