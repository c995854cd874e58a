"""
Application services layer.

Services orchestrate business operations using repositories and domain services.
"""

from services.bet_service import BetReceipt, BetService
from services.contest_service import ContestService
from services.deposit_service import DepositIntent, DepositOutcome, DepositResult, DepositService

# Service interfaces (ABCs)
from services.interfaces import (
    IBetService,
    IContestService,
    IDepositService,
    IProfileService,
    ISettlementService,
    ITierConfigService,
    IWalletService,
    IWithdrawalService,
)
from services.notification_service import NotificationService
from services.permissions import has_admin_permission, has_allowlisted_admin
from services.profile_service import ProfileService

# Result type for consistent error handling
from services.result import Result
from services.settlement_service import FailedPayout, SettlementResult, SettlementService
from services.tier_config_service import TierConfigService
from services.wallet_service import WalletService
from services.withdrawal_service import WithdrawalService

__all__ = [
    # Concrete services
    "BetService",
    "ContestService",
    "DepositService",
    "NotificationService",
    "ProfileService",
    "SettlementService",
    "TierConfigService",
    "WalletService",
    "WithdrawalService",
    # Value objects
    "BetReceipt",
    "DepositIntent",
    "DepositOutcome",
    "DepositResult",
    "FailedPayout",
    "SettlementResult",
    # Permissions
    "has_admin_permission",
    "has_allowlisted_admin",
    # Result type
    "Result",
    # Interfaces
    "IBetService",
    "IContestService",
    "IDepositService",
    "IProfileService",
    "ISettlementService",
    "ITierConfigService",
    "IWalletService",
    "IWithdrawalService",
]
