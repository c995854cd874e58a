"""
Service for the admin-set prize tier percentages.
"""

import logging
from decimal import Decimal, InvalidOperation

from config import DEFAULT_FIVE_HITS_SHARE, DEFAULT_HOUSE_SHARE, DEFAULT_SIX_HITS_SHARE
from domain.models.caller import Caller
from domain.models.tier_config import TierConfig
from repositories.interfaces import ITierConfigRepository
from services.errors import BolaoError, ValidationError
from services.interfaces import ITierConfigService
from services.permissions import require_admin
from services.result import Result

logger = logging.getLogger("bolao.services.tier_config")


class TierConfigService(ITierConfigService):
    """
    Reads are never cached: settlement calls get_config() at the start of
    every run so an admin change is picked up immediately.
    """

    def __init__(self, tier_config_repo: ITierConfigRepository, defaults: TierConfig | None = None):
        self.tier_config_repo = tier_config_repo
        self.defaults = defaults or TierConfig(
            house_share=DEFAULT_HOUSE_SHARE,
            six_hits_share=DEFAULT_SIX_HITS_SHARE,
            five_hits_share=DEFAULT_FIVE_HITS_SHARE,
        )

    def get_config(self) -> TierConfig:
        row = self.tier_config_repo.get()
        if not row:
            return self.defaults
        return TierConfig(
            house_share=Decimal(row["house_share"]),
            six_hits_share=Decimal(row["six_hits_share"]),
            five_hits_share=Decimal(row["five_hits_share"]),
        )

    def update_config(
        self,
        caller: Caller,
        house_share,
        six_hits_share,
        five_hits_share,
    ) -> Result[TierConfig]:
        try:
            admin_id = require_admin(caller)
            try:
                config = TierConfig(
                    house_share=Decimal(str(house_share)),
                    six_hits_share=Decimal(str(six_hits_share)),
                    five_hits_share=Decimal(str(five_hits_share)),
                )
                config.validate()
            except (InvalidOperation, ValueError) as exc:
                raise ValidationError(str(exc)) from exc
        except BolaoError as exc:
            return Result.from_error(exc)

        self.tier_config_repo.save(
            str(config.house_share),
            str(config.six_hits_share),
            str(config.five_hits_share),
            updated_by=admin_id,
        )
        logger.info(
            f"Tier config updated by admin {admin_id}: house={config.house_share} "
            f"six={config.six_hits_share} five={config.five_hits_share}"
        )
        return Result.ok(config)
