from __future__ import annotations

from typing import Any

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_window
from ..common.validators import require_year_month
from ..crews.repository import CrewRepository
from ..crews.service import CrewAccessService
from .aggregator import aggregate_month
from .model import CalendarSummary


class CalendarService:
    def __init__(self, attendance: AttendanceRepository, crews: CrewRepository):
        self._attendance = attendance
        self._access = CrewAccessService(crews)

    def aggregate_month(self, *, crew_id: str, year: Any, month: Any) -> CalendarSummary:
        y, m = require_year_month(year, month)
        crew = self._access.require_crew(crew_id)

        start, end = month_window(y, m)
        events = self._attendance.list_for_crew(crew_id=crew.crew_id, start=start, end=end)
        return aggregate_month(y, m, events)
