"""
Contest domain model.
"""

from dataclasses import dataclass
from decimal import Decimal

from utils.money import ZERO

STATUS_OPEN = "open"
STATUS_CLOSED = "closed"

# Settlement progress, tracked separately from open/closed so an interrupted
# run can be picked up by reconciliation.
PAYOUT_UNSETTLED = "unsettled"
PAYOUT_SCORING = "scoring"
PAYOUT_PAYING = "paying"
PAYOUT_PAID = "paid"
PAYOUT_PARTIAL = "partial"


@dataclass
class Contest:
    """One monthly pool cycle."""

    id: int
    month_year: str
    status: str
    bet_price: Decimal
    closing_at: int  # Unix timestamp; bets are refused from this instant on
    total_collected: Decimal = ZERO
    num_bets: int = 0
    draw_date: str | None = None
    winning_numbers: list[int] | None = None
    created_at: int | None = None
    closed_at: int | None = None
    winners6: int | None = None
    winners5: int | None = None
    prize_value: Decimal | None = None
    carryover_amount: Decimal | None = None
    payout_status: str = PAYOUT_UNSETTLED

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_OPEN

    def accepts_bets_at(self, now: float) -> bool:
        return self.is_open and now < self.closing_at
