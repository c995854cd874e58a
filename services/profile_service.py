"""
Service for user payout profiles (PIX key).
"""

import logging

from domain.models.caller import Caller
from repositories.interfaces import IProfileRepository
from services.errors import BolaoError, ValidationError
from services.interfaces import IProfileService
from services.permissions import require_caller
from services.result import Result

logger = logging.getLogger("bolao.services.profile")

PIX_KEY_MAX_LENGTH = 77


class ProfileService(IProfileService):
    def __init__(self, profile_repo: IProfileRepository):
        self.profile_repo = profile_repo

    def get_pix_key(self, user_id: int) -> str | None:
        return self.profile_repo.get_pix_key(user_id)

    def set_pix_key(self, caller: Caller, pix_key: str) -> Result[str]:
        """
        Store the caller's payout destination.

        Any PIX key format is accepted (CPF, e-mail, phone, random key); only
        emptiness and length are checked.
        """
        try:
            user_id = require_caller(caller)
            key = (pix_key or "").strip()
            if not key:
                raise ValidationError("PIX key cannot be empty.")
            if len(key) > PIX_KEY_MAX_LENGTH:
                raise ValidationError(f"PIX key cannot exceed {PIX_KEY_MAX_LENGTH} characters.")
        except BolaoError as exc:
            return Result.from_error(exc)

        self.profile_repo.set_pix_key(user_id, key, username=caller.display_name)
        logger.info(f"PIX key updated for user {user_id}")
        return Result.ok(key)
