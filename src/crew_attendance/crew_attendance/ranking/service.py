from __future__ import annotations

import logging
from typing import Any, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_window
from ..common.validators import require_year_month
from ..core.enums import RankingMetric
from ..core.exceptions import ValidationError
from ..crews.repository import CrewRepository
from ..crews.service import CrewAccessService
from .calculator import compute_ranking
from .model import RankEntry, RankingBoard

logger = logging.getLogger(__name__)


def parse_metric(value: Any) -> RankingMetric:
    if isinstance(value, RankingMetric):
        return value
    try:
        return RankingMetric(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"metric must be 'attendance' or 'hosting', got {value!r}")


class RankingService:
    def __init__(self, attendance: AttendanceRepository, crews: CrewRepository):
        self._attendance = attendance
        self._access = CrewAccessService(crews)

    def compute_ranking(
        self,
        *,
        crew_id: str,
        year: Any,
        month: Any,
        metric: Any = RankingMetric.ATTENDANCE,
        requesting_user_id: Optional[str] = None,
    ) -> list[RankEntry]:
        y, m = require_year_month(year, month)
        metric = parse_metric(metric)
        crew = self._access.require_crew(crew_id)
        return self._ranking(crew.crew_id, y, m, metric, requesting_user_id)

    def compute_rankings(
        self,
        *,
        crew_id: str,
        year: Any,
        month: Any,
        requesting_user_id: Optional[str] = None,
    ) -> RankingBoard:
        y, m = require_year_month(year, month)
        crew = self._access.require_crew(crew_id)
        return RankingBoard(
            year=y,
            month=m,
            crew_name=crew.name,
            attendance=self._ranking(crew.crew_id, y, m, RankingMetric.ATTENDANCE, requesting_user_id),
            hosting=self._ranking(crew.crew_id, y, m, RankingMetric.HOSTING, requesting_user_id),
        )

    def _ranking(self, crew_id: str, year: int, month: int, metric: RankingMetric, requesting_user_id: Optional[str]):
        start, end = month_window(year, month)
        events = self._attendance.list_for_crew(
            crew_id=crew_id,
            start=start,
            end=end,
            host_only=metric == RankingMetric.HOSTING,
        )
        logger.debug("ranking %s for crew %s %04d-%02d over %d events", metric.value, crew_id, year, month, len(events))
        return compute_ranking(events, requesting_user_id=requesting_user_id)
