"""
Prize tier configuration domain model.
"""

from dataclasses import dataclass
from decimal import Decimal

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class TierConfig:
    """
    Admin-set percentages consumed by settlement.

    house_share is deducted from every individual prize; the two tier shares
    split the pool and must add up to 100.
    """

    house_share: Decimal
    six_hits_share: Decimal
    five_hits_share: Decimal

    def validate(self) -> None:
        """
        Raises:
            ValueError: if any share is out of range or the tier shares don't sum to 100
        """
        for name in ("house_share", "six_hits_share", "five_hits_share"):
            value = getattr(self, name)
            if not Decimal("0") <= value <= HUNDRED:
                raise ValueError(f"{name} must be between 0 and 100 (got {value}).")
        if self.six_hits_share + self.five_hits_share != HUNDRED:
            raise ValueError(
                "6-hit and 5-hit shares must add up to 100 "
                f"(got {self.six_hits_share} + {self.five_hits_share})."
            )
