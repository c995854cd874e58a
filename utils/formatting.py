"""
Shared formatting helpers for bot messages.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from domain.models.contest import Contest
from domain.models.transaction import Transaction
from utils.money import format_brl

STATUS_EMOJIS = {
    "pending": "⏳",
    "completed": "✅",
    "failed": "❌",
}

TYPE_LABELS = {
    "deposit": "Deposit",
    "withdrawal": "Withdrawal",
    "bet": "Bet",
    "prize": "Prize",
}


def format_numbers(numbers: Iterable[int]) -> str:
    """Two-digit, space separated: [3, 14, 15] -> '03 14 15'."""
    return " ".join(f"{n:02d}" for n in sorted(numbers))


def format_timestamp(ts: int | float | None, style: str = "f") -> str:
    """Discord timestamp markup, rendered in each reader's local time."""
    if ts is None:
        return "—"
    return f"<t:{int(ts)}:{style}>"


def parse_closing_datetime(raw: str) -> datetime:
    """
    Parse an admin-entered closing date ("2026-11-30 20:00" or ISO 8601).
    Naive values are taken as UTC.

    Raises:
        ValueError: if the text is not a recognizable date/time
    """
    text = raw.strip()
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d", "%d/%m/%Y %H:%M", "%d/%m/%Y"):
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    else:
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_contest_summary(contest: Contest) -> str:
    lines = [
        f"**{contest.month_year}** (#{contest.id}) · {contest.status}",
        f"Bet price: {format_brl(contest.bet_price)}",
        f"Pool: {format_brl(contest.total_collected)} from {contest.num_bets} bet(s)",
    ]
    if contest.is_open:
        lines.append(f"Closes {format_timestamp(contest.closing_at)} ({format_timestamp(contest.closing_at, 'R')})")
    if contest.draw_date:
        lines.append(f"Draw date: {contest.draw_date}")
    if contest.winning_numbers:
        lines.append(f"Drawn: `{format_numbers(contest.winning_numbers)}`")
    if contest.winners6 is not None:
        lines.append(f"Winners: {contest.winners6} with 6 hits, {contest.winners5} with 5 hits")
    return "\n".join(lines)


def format_transaction_line(tx: Transaction) -> str:
    emoji = STATUS_EMOJIS.get(tx.status, "•")
    label = TYPE_LABELS.get(tx.type, tx.type)
    line = f"{emoji} #{tx.id} {label} {format_brl(tx.amount)} · {format_timestamp(tx.created_at, 'd')}"
    if tx.description:
        line += f" · {tx.description}"
    return line
