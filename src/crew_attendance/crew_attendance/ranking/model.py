from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RankEntry:
    user_id: str
    display_name: str
    avatar_url: Optional[str]
    value: int
    rank: int
    is_requesting_user: bool


@dataclass(frozen=True)
class RankingBoard:
    """Both monthly rankings of a crew, as shown on the ranking page."""

    year: int
    month: int
    crew_name: str
    attendance: list[RankEntry]
    hosting: list[RankEntry]
