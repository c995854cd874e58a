"""
Repository layer for data access abstraction.
"""

from repositories.base_repository import BaseRepository
from repositories.bet_repository import BetRepository
from repositories.contest_repository import ContestRepository
from repositories.interfaces import (
    IBetRepository,
    IContestRepository,
    INotificationRepository,
    IProfileRepository,
    ITierConfigRepository,
    ITransactionRepository,
    IWalletRepository,
)
from repositories.notification_repository import NotificationRepository
from repositories.profile_repository import ProfileRepository
from repositories.tier_config_repository import TierConfigRepository
from repositories.transaction_repository import TransactionRepository
from repositories.wallet_repository import WalletRepository

__all__ = [
    "BaseRepository",
    "BetRepository",
    "ContestRepository",
    "NotificationRepository",
    "ProfileRepository",
    "TierConfigRepository",
    "TransactionRepository",
    "WalletRepository",
    "IBetRepository",
    "IContestRepository",
    "INotificationRepository",
    "IProfileRepository",
    "ITierConfigRepository",
    "ITransactionRepository",
    "IWalletRepository",
]
