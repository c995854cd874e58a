"""
Domain models - pure data structures representing business entities.
"""

from domain.models.bet import Bet
from domain.models.caller import Caller
from domain.models.contest import Contest
from domain.models.payment import PaymentConfirmation, PaymentIntent, PaymentStatus
from domain.models.tier_config import TierConfig
from domain.models.transaction import Transaction

__all__ = [
    "Bet",
    "Caller",
    "Contest",
    "PaymentConfirmation",
    "PaymentIntent",
    "PaymentStatus",
    "TierConfig",
    "Transaction",
]
