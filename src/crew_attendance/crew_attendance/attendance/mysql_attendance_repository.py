from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db, to_utc
from .model import AttendanceEvent, NewAttendanceEvent
from .repository import AttendanceRepository

_SELECT_EVENTS = """
    SELECT
        ar.attendance_id, ar.user_id, ar.crew_id, ar.attendance_timestamp,
        ar.location, ar.exercise_type_id, ar.is_host, ar.deleted_at,
        u.first_name, u.profile_image_url,
        et.name AS exercise_type_name
    FROM attendance_records ar
    LEFT JOIN users u ON u.user_id = ar.user_id
    LEFT JOIN exercise_types et ON et.exercise_type_id = ar.exercise_type_id
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _window_where(*, crew_id: str, start: datetime, end: datetime, host_only: bool) -> tuple[str, list[object]]:
        clauses = [
            "ar.crew_id=%s",
            "ar.deleted_at IS NULL",
            "ar.attendance_timestamp >= %s",
            "ar.attendance_timestamp < %s",
        ]
        params: list[object] = [crew_id, to_db(start), to_db(end)]
        if host_only:
            clauses.append("ar.is_host=1")
        return " AND ".join(clauses), params

    def list_for_crew(
        self,
        *,
        crew_id: str,
        start: datetime,
        end: datetime,
        host_only: bool = False,
    ) -> Sequence[AttendanceEvent]:
        where, params = self._window_where(crew_id=crew_id, start=start, end=end, host_only=host_only)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT_EVENTS} WHERE {where} ORDER BY ar.attendance_timestamp ASC, ar.attendance_id ASC",
                tuple(params),
            )
            return [self._to_event(r) for r in fetchall(cur)]

    def count_for_crew(self, *, crew_id: str, start: datetime, end: datetime, host_only: bool = False) -> int:
        where, params = self._window_where(crew_id=crew_id, start=start, end=end, host_only=host_only)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records ar WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def distinct_user_ids(
        self,
        *,
        crew_id: str,
        start: datetime,
        end: datetime,
        host_only: bool = False,
    ) -> Sequence[str]:
        where, params = self._window_where(crew_id=crew_id, start=start, end=end, host_only=host_only)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT DISTINCT ar.user_id FROM attendance_records ar WHERE {where} ORDER BY ar.user_id",
                tuple(params),
            )
            return [r["user_id"] for r in fetchall(cur)]

    def insert_many(self, events: Sequence[NewAttendanceEvent]) -> list[int]:
        ids: list[int] = []
        # One connection, one transaction: db_cursor rolls everything back on a duplicate.
        with db_cursor(self._conn_factory) as (_, cur):
            for e in events:
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, crew_id, attendance_timestamp, location, exercise_type_id, is_host)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (e.user_id, e.crew_id, to_db(e.occurred_at), e.location, int(e.exercise_type_id), int(e.is_host)),
                )
                ids.append(int(cur.lastrowid))
        return ids

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_EVENTS} WHERE ar.attendance_id=%s", (int(event_id),))
            r = fetchone(cur)
            return self._to_event(r) if r else None

    def set_deleted_at(self, *, event_id: int, deleted_at: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET deleted_at=%s WHERE attendance_id=%s",
                (to_db(deleted_at) if deleted_at else None, int(event_id)),
            )
            return cur.rowcount > 0

    @staticmethod
    def _to_event(r: dict) -> AttendanceEvent:
        return AttendanceEvent(
            event_id=int(r["attendance_id"]),
            user_id=r["user_id"],
            crew_id=r["crew_id"],
            occurred_at=to_utc(r["attendance_timestamp"]),
            location=r.get("location"),
            exercise_type_id=int(r["exercise_type_id"]),
            is_host=bool(r["is_host"]),
            user_name=r.get("first_name"),
            avatar_url=r.get("profile_image_url"),
            exercise_type_name=r.get("exercise_type_name"),
            deleted_at=to_utc(r.get("deleted_at")),
        )
