from __future__ import annotations

from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError, AuthorizationError, CrewNotFoundError
from .model import Crew, CrewMember
from .repository import CrewRepository


class CrewAccessService:
    """Use case: resolve a crew and check crew-scoped membership and admin rights."""

    def __init__(self, crews: CrewRepository):
        self._crews = crews

    def require_crew(self, crew_id: str) -> Crew:
        crew_id = require_non_empty(crew_id, "crewId")
        crew = self._crews.get_by_id(crew_id)
        if not crew:
            raise CrewNotFoundError(f"Crew {crew_id} does not exist")
        return crew

    def require_member(self, *, crew_id: str, user_id: str | None) -> CrewMember:
        if user_id is None or not str(user_id).strip():
            raise AuthenticationError("Authentication required")

        member = self._crews.get_member(crew_id=crew_id, user_id=str(user_id).strip())
        if not member or not member.is_active:
            raise AuthorizationError("You do not have access to this crew")
        return member

    def require_admin(self, *, crew_id: str, user_id: str | None) -> CrewMember:
        member = self.require_member(crew_id=crew_id, user_id=user_id)
        if not member.is_admin:
            raise AuthorizationError("Crew admin role required")
        return member
