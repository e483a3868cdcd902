from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import InviteCode


class InviteCodeRepository(Protocol):
    def exists(self, code: str) -> bool:
        """Case-sensitive lookup across every code ever issued."""

        raise NotImplementedError

    def create(self, *, crew_id: str, code: str, created_by: str, description: Optional[str] = None) -> InviteCode:
        """Raises DuplicateKeyError when ``code`` is already taken."""

        raise NotImplementedError

    def get_by_id(self, code_id: int) -> Optional[InviteCode]:
        raise NotImplementedError

    def list_for_crew(self, crew_id: str) -> Sequence[InviteCode]:
        raise NotImplementedError

    def set_active(self, *, code_id: int, is_active: bool) -> bool:
        raise NotImplementedError
