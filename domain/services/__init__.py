"""
Domain services containing pure business logic.
"""

from domain.services.number_validation import count_hits, parse_numbers, validate_numbers
from domain.services.prize_calculator import PrizeCalculator, PrizePlan, TierPayout

__all__ = [
    "PrizeCalculator",
    "PrizePlan",
    "TierPayout",
    "count_hits",
    "parse_numbers",
    "validate_numbers",
]
