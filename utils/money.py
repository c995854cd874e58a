"""
Fixed-point currency helpers.

Amounts travel through the application as ``Decimal`` with two places and are
stored in SQLite as integer cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Keeps amount * 100 well inside a signed 64-bit SQLite INTEGER
MAX_AMOUNT = Decimal("1000000000.00")


def round_money(value: Decimal | int | float | str) -> Decimal:
    """Round to two decimal places, half away from zero."""
    value = to_decimal(value)
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount out of range: {value}") from exc


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Amount must be a number.")
    if isinstance(value, float):
        # str() first so 0.1 stays 0.1 instead of the binary expansion
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def parse_money(raw: Decimal | int | float | str) -> Decimal:
    """
    Parse user or provider input into a two-place Decimal.

    Accepts a comma as decimal separator ("12,50"), since that is how amounts
    are written in BRL.

    Raises:
        ValueError: if the value is not a finite number or exceeds MAX_AMOUNT
    """
    if isinstance(raw, str):
        raw = raw.strip().replace(",", ".")
    value = to_decimal(raw)
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {raw!r}")
    if abs(value) > MAX_AMOUNT:
        raise ValueError(f"Amount too large: {raw!r}")
    return round_money(value)


def to_cents(amount: Decimal) -> int:
    return int(round_money(amount) * 100)


def from_cents(cents: int | None) -> Decimal:
    if cents is None:
        return ZERO
    return (Decimal(int(cents)) / 100).quantize(CENT)


def format_brl(amount: Decimal) -> str:
    return f"R$ {round_money(amount):.2f}"
