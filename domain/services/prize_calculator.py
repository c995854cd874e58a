"""
Tiered prize computation.

Pure functions: no persistence, no ledger access. The settlement service
feeds it the pool, the winner counts and a TierConfig read at the start of
the run.
"""

from dataclasses import dataclass
from decimal import Decimal

from domain.models.tier_config import HUNDRED, TierConfig
from utils.money import ZERO, round_money


@dataclass(frozen=True)
class TierPayout:
    hits: int
    winner_count: int
    pool: Decimal
    per_winner_gross: Decimal
    per_winner_net: Decimal

    @property
    def total_net(self) -> Decimal:
        return self.per_winner_net * self.winner_count


@dataclass(frozen=True)
class PrizePlan:
    prize_value: Decimal
    six: TierPayout
    five: TierPayout

    @property
    def had_winners(self) -> bool:
        return self.six.winner_count + self.five.winner_count > 0

    @property
    def carryover_amount(self) -> Decimal:
        return ZERO if self.had_winners else self.prize_value

    @property
    def total_net(self) -> Decimal:
        return self.six.total_net + self.five.total_net

    def net_for_hits(self, hits: int) -> Decimal | None:
        if hits == 6 and self.six.winner_count:
            return self.six.per_winner_net
        if hits == 5 and self.five.winner_count:
            return self.five.per_winner_net
        return None


class PrizeCalculator:
    """
    Splits a contest pool across the 6-hit and 5-hit tiers.

    A tier without winners gets a zero pool; its share is not moved to the
    other tier. The house share comes off each individual prize, and the
    rounding remainder stays with the house.
    """

    def calculate(
        self,
        prize_value: Decimal,
        winners6: int,
        winners5: int,
        tiers: TierConfig,
    ) -> PrizePlan:
        if prize_value < 0:
            raise ValueError("Prize value cannot be negative.")
        if winners6 < 0 or winners5 < 0:
            raise ValueError("Winner counts cannot be negative.")
        tiers.validate()

        prize_value = round_money(prize_value)
        keep = (HUNDRED - tiers.house_share) / HUNDRED
        return PrizePlan(
            prize_value=prize_value,
            six=self._tier(6, prize_value, tiers.six_hits_share, winners6, keep),
            five=self._tier(5, prize_value, tiers.five_hits_share, winners5, keep),
        )

    @staticmethod
    def _tier(hits: int, prize_value: Decimal, share: Decimal, count: int, keep: Decimal) -> TierPayout:
        if count == 0:
            return TierPayout(hits, 0, ZERO, ZERO, ZERO)
        pool = round_money(prize_value * share / HUNDRED)
        gross = pool / count
        return TierPayout(
            hits=hits,
            winner_count=count,
            pool=pool,
            per_winner_gross=round_money(gross),
            # net from the unrounded gross so rounding happens once
            per_winner_net=round_money(gross * keep),
        )
