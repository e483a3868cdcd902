from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_utc
from .model import InviteCode
from .repository import InviteCodeRepository

_COLUMNS = """
    code_id, crew_id, invite_code, description, is_active,
    max_uses, used_count, expires_at, created_by, created_at
"""


class MySQLInviteCodeRepository(InviteCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # invite_code uses a binary collation, so '=' is case-sensitive.
            cur.execute("SELECT 1 AS hit FROM crew_invite_codes WHERE invite_code=%s LIMIT 1", (code,))
            return fetchone(cur) is not None

    def create(self, *, crew_id: str, code: str, created_by: str, description: Optional[str] = None) -> InviteCode:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO crew_invite_codes(crew_id, invite_code, description, created_by)
                VALUES(%s,%s,%s,%s)
                """,
                (crew_id, code, description, created_by),
            )
            code_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM crew_invite_codes WHERE code_id=%s", (code_id,))
            return self._to_code(fetchone(cur))

    def get_by_id(self, code_id: int) -> Optional[InviteCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM crew_invite_codes WHERE code_id=%s", (int(code_id),))
            r = fetchone(cur)
            return self._to_code(r) if r else None

    def list_for_crew(self, crew_id: str) -> Sequence[InviteCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM crew_invite_codes WHERE crew_id=%s ORDER BY created_at DESC, code_id DESC",
                (crew_id,),
            )
            return [self._to_code(r) for r in fetchall(cur)]

    def set_active(self, *, code_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE crew_invite_codes SET is_active=%s WHERE code_id=%s",
                (int(is_active), int(code_id)),
            )
            return cur.rowcount > 0

    @staticmethod
    def _to_code(r: dict) -> InviteCode:
        return InviteCode(
            code_id=int(r["code_id"]),
            crew_id=r["crew_id"],
            code=r["invite_code"],
            is_active=bool(r["is_active"]),
            created_by=r["created_by"],
            description=r.get("description"),
            used_count=int(r.get("used_count") or 0),
            max_uses=r.get("max_uses"),
            expires_at=to_utc(r.get("expires_at")),
            created_at=to_utc(r.get("created_at")),
        )
