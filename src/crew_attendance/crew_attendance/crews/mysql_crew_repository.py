from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MemberStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_utc
from .model import Crew, CrewLocation, CrewMember
from .repository import CrewRepository


class MySQLCrewRepository(CrewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, crew_id: str) -> Optional[Crew]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT crew_id, name, description FROM crews WHERE crew_id=%s", (crew_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Crew(crew_id=r["crew_id"], name=r["name"], description=r.get("description"))

    def get_member(self, *, crew_id: str, user_id: str) -> Optional[CrewMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT crew_id, user_id, role, status, joined_at
                FROM crew_members
                WHERE crew_id=%s AND user_id=%s
                """,
                (crew_id, user_id),
            )
            r = fetchone(cur)
            return self._to_member(r) if r else None

    def list_members(self, crew_id: str) -> Sequence[CrewMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT crew_id, user_id, role, status, joined_at
                FROM crew_members
                WHERE crew_id=%s
                ORDER BY joined_at ASC, user_id ASC
                """,
                (crew_id,),
            )
            return [self._to_member(r) for r in fetchall(cur)]

    def get_location(self, location_id: int) -> Optional[CrewLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT location_id, crew_id, name, is_active FROM crew_locations WHERE location_id=%s",
                (int(location_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CrewLocation(
                location_id=int(r["location_id"]),
                crew_id=r["crew_id"],
                name=r["name"],
                is_active=bool(r["is_active"]),
            )

    @staticmethod
    def _to_member(r: dict) -> CrewMember:
        return CrewMember(
            crew_id=r["crew_id"],
            user_id=r["user_id"],
            role=Role(r["role"]),
            status=MemberStatus(r["status"]),
            joined_at=to_utc(r["joined_at"]),
        )
