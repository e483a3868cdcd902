from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Crew, CrewLocation, CrewMember


class CrewRepository(Protocol):
    def get_by_id(self, crew_id: str) -> Optional[Crew]:
        raise NotImplementedError

    def get_member(self, *, crew_id: str, user_id: str) -> Optional[CrewMember]:
        raise NotImplementedError

    def list_members(self, crew_id: str) -> Sequence[CrewMember]:
        """Full roster, active and inactive."""

        raise NotImplementedError

    def get_location(self, location_id: int) -> Optional[CrewLocation]:
        raise NotImplementedError
