"""
Bet domain model.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Bet:
    """A single 6-number pick in a contest."""

    id: int
    contest_id: int
    user_id: int
    chosen_numbers: list[int]
    amount: Decimal
    hits: int | None = None
    prize_amount: Decimal | None = None
    prize_paid: bool = False
    created_at: int | None = None

    @property
    def is_winner(self) -> bool:
        return self.prize_amount is not None and self.prize_amount > 0
