"""
Wallet transaction domain model.
"""

from dataclasses import dataclass
from decimal import Decimal

TYPE_DEPOSIT = "deposit"
TYPE_WITHDRAWAL = "withdrawal"
TYPE_BET = "bet"
TYPE_PRIZE = "prize"
VALID_TYPES = (TYPE_DEPOSIT, TYPE_WITHDRAWAL, TYPE_BET, TYPE_PRIZE)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
VALID_STATUSES = (STATUS_PENDING, STATUS_COMPLETED, STATUS_FAILED)


@dataclass
class Transaction:
    """
    Ledger history entry.

    Bets are recorded with a negative amount; every other type is positive.
    """

    id: int
    user_id: int
    type: str
    amount: Decimal
    status: str
    description: str | None = None
    payment_id: str | None = None
    contest_id: int | None = None
    bet_id: int | None = None
    created_at: int | None = None
    updated_at: int | None = None

    @property
    def is_pending_withdrawal(self) -> bool:
        return self.type == TYPE_WITHDRAWAL and self.status == STATUS_PENDING
