"""Tests for formatting utilities."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from domain.models.contest import Contest
from domain.models.transaction import Transaction
from utils.formatting import (
    format_contest_summary,
    format_numbers,
    format_timestamp,
    format_transaction_line,
    parse_closing_datetime,
)


class TestFormatNumbers:
    def test_sorted_and_zero_padded(self):
        assert format_numbers([42, 3, 0, 99, 15, 7]) == "00 03 07 15 42 99"

    def test_empty(self):
        assert format_numbers([]) == ""


class TestFormatTimestamp:
    def test_none_renders_dash(self):
        assert format_timestamp(None) == "—"

    def test_discord_markup(self):
        assert format_timestamp(1_800_000_000.7) == "<t:1800000000:f>"
        assert format_timestamp(1_800_000_000, "R") == "<t:1800000000:R>"


class TestParseClosingDatetime:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2026-11-30 20:00", datetime(2026, 11, 30, 20, 0, tzinfo=timezone.utc)),
            ("2026-11-30", datetime(2026, 11, 30, tzinfo=timezone.utc)),
            ("30/11/2026 20:00", datetime(2026, 11, 30, 20, 0, tzinfo=timezone.utc)),
            ("30/11/2026", datetime(2026, 11, 30, tzinfo=timezone.utc)),
            ("  2026-11-30T20:00:00  ", datetime(2026, 11, 30, 20, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_accepted_formats(self, raw, expected):
        assert parse_closing_datetime(raw) == expected

    def test_explicit_offset_kept(self):
        parsed = parse_closing_datetime("2026-11-30T20:00:00-03:00")

        assert parsed.utcoffset().total_seconds() == -3 * 3600

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_closing_datetime("next friday")


class TestFormatTransactionLine:
    def test_includes_status_label_amount_and_description(self):
        tx = Transaction(
            id=12,
            user_id=5,
            type="prize",
            amount=Decimal("160.00"),
            status="completed",
            description="Prize for contest 11/2026",
            created_at=1_800_000_000,
        )

        assert format_transaction_line(tx) == (
            "✅ #12 Prize R$ 160.00 · <t:1800000000:d> · Prize for contest 11/2026"
        )

    def test_pending_withdrawal_without_description(self):
        tx = Transaction(id=3, user_id=5, type="withdrawal", amount=Decimal("40"), status="pending")

        assert format_transaction_line(tx) == "⏳ #3 Withdrawal R$ 40.00 · —"


class TestFormatContestSummary:
    def test_open_contest(self):
        contest = Contest(
            id=1,
            month_year="11/2026",
            status="open",
            bet_price=Decimal("10.00"),
            closing_at=1_800_000_000,
            total_collected=Decimal("30.00"),
            num_bets=3,
        )

        summary = format_contest_summary(contest)

        assert "**11/2026** (#1) · open" in summary
        assert "Bet price: R$ 10.00" in summary
        assert "Pool: R$ 30.00 from 3 bet(s)" in summary
        assert "<t:1800000000:R>" in summary

    def test_settled_contest_shows_draw_and_winners(self):
        contest = Contest(
            id=2,
            month_year="12/2026",
            status="closed",
            bet_price=Decimal("10.00"),
            closing_at=1_800_000_000,
            winning_numbers=[5, 1, 20],
            winners6=1,
            winners5=0,
        )

        summary = format_contest_summary(contest)

        assert "Closes" not in summary
        assert "Drawn: `01 05 20`" in summary
        assert "Winners: 1 with 6 hits, 0 with 5 hits" in summary
