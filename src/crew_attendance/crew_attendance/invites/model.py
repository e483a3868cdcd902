from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class InviteCode:
    """Short shareable code granting access to join a crew.

    ``used_count`` is maintained by the redemption flow; codes are deactivated,
    never deleted, so a code string is never issued twice.
    """

    code_id: int
    crew_id: str
    code: str
    is_active: bool
    created_by: str
    description: Optional[str] = None
    used_count: int = 0
    max_uses: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
