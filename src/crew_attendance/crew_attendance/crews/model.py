from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MemberStatus, Role


@dataclass(frozen=True)
class Crew:
    """Tenant: a group whose members track attendance together."""

    crew_id: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class CrewMember:
    """Roster row. The role is scoped to this crew."""

    crew_id: str
    user_id: str
    role: Role
    status: MemberStatus
    joined_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class CrewLocation:
    location_id: int
    crew_id: str
    name: str
    is_active: bool = True
