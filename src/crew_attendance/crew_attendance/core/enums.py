from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Crew-scoped role used for authorization."""

    MEMBER = "member"
    ADMIN = "admin"


class MemberStatus(str, Enum):
    """Roster status of a crew member."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class RankingMetric(str, Enum):
    ATTENDANCE = "attendance"
    HOSTING = "hosting"


class StatsMode(str, Enum):
    """How the admin stats service reads from the store.

    Both modes return identical stats; only the number of queries differs.
    """

    NAIVE = "naive"
    OPTIMIZED = "optimized"
