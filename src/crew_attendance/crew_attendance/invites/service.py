from __future__ import annotations

import logging
import secrets
from typing import Any, Callable, Optional, Sequence

from ..common.validators import require_positive_id
from ..core.constants import INVITE_CODE_ALPHABET, INVITE_CODE_LENGTH, MAX_INVITE_CODE_ATTEMPTS
from ..core.exceptions import DuplicateKeyError, InviteCodeExhaustedError, ValidationError
from ..crews.repository import CrewRepository
from ..crews.service import CrewAccessService
from .model import InviteCode
from .repository import InviteCodeRepository

logger = logging.getLogger(__name__)


def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    """Uniform draw over ``[A-Za-z]`` per position."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


class InviteCodeService:
    """Use case: issue and manage crew invite codes.

    Issuing is a bounded retry loop. The existence check is only a fast path:
    the unique key on the code is what makes concurrent issuers safe, so a
    DuplicateKeyError on insert counts as one more collision.
    """

    def __init__(
        self,
        invite_codes: InviteCodeRepository,
        crews: CrewRepository,
        *,
        code_factory: Callable[[], str] = generate_invite_code,
        max_attempts: int = MAX_INVITE_CODE_ATTEMPTS,
    ):
        self._codes = invite_codes
        self._access = CrewAccessService(crews)
        self._code_factory = code_factory
        self._max_attempts = int(max_attempts)

    def issue_invite_code(
        self,
        *,
        crew_id: str,
        issuer_id: Optional[str],
        description: Optional[str] = None,
    ) -> InviteCode:
        crew = self._access.require_crew(crew_id)
        issuer = self._access.require_admin(crew_id=crew.crew_id, user_id=issuer_id)
        note = (description or "").strip() or None

        for attempt in range(1, self._max_attempts + 1):
            candidate = self._code_factory()
            if self._codes.exists(candidate):
                logger.debug("invite code collision on attempt %d (pre-check)", attempt)
                continue
            try:
                issued = self._codes.create(
                    crew_id=crew.crew_id,
                    code=candidate,
                    created_by=issuer.user_id,
                    description=note,
                )
            except DuplicateKeyError:
                logger.debug("invite code collision on attempt %d (insert)", attempt)
                continue

            logger.info("issued invite code %s for crew %s", issued.code_id, crew.crew_id)
            return issued

        logger.warning("invite code generation exhausted after %d attempts for crew %s", self._max_attempts, crew.crew_id)
        raise InviteCodeExhaustedError(f"Could not generate a unique invite code in {self._max_attempts} attempts")

    def list_invite_codes(self, *, crew_id: str, acting_user_id: Optional[str]) -> Sequence[InviteCode]:
        crew = self._access.require_crew(crew_id)
        self._access.require_admin(crew_id=crew.crew_id, user_id=acting_user_id)
        return self._codes.list_for_crew(crew.crew_id)

    def deactivate_invite_code(self, *, code_id: Any, acting_user_id: Optional[str]) -> InviteCode:
        ident = require_positive_id(code_id, "codeId")
        code = self._codes.get_by_id(ident)
        if not code:
            raise ValidationError(f"Invite code {ident} does not exist")
        self._access.require_admin(crew_id=code.crew_id, user_id=acting_user_id)

        if not code.is_active:
            return code
        if not self._codes.set_active(code_id=ident, is_active=False):
            raise ValidationError("Deactivating the invite code failed")

        logger.info("deactivated invite code %s of crew %s", ident, code.crew_id)
        return self._codes.get_by_id(ident) or code
