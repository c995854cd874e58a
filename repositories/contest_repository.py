"""
Repository for contests.
"""

import json
import logging

from domain.models.contest import (
    PAYOUT_SCORING,
    PAYOUT_UNSETTLED,
    STATUS_CLOSED,
    STATUS_OPEN,
    Contest,
)
from repositories.base_repository import BaseRepository
from repositories.interfaces import IContestRepository
from utils.money import from_cents

logger = logging.getLogger("bolao.repositories.contest")


class ContestRepository(BaseRepository, IContestRepository):
    """
    Handles contest persistence.

    The open -> closed transition is a single conditional UPDATE so only one
    concurrent close can win.
    """

    def create_if_none_open(
        self,
        month_year: str,
        bet_price_cents: int,
        closing_at: int,
        seed_cents: int,
        draw_date: str | None = None,
    ) -> int | None:
        """
        Insert a new open contest unless one is already open.

        Returns:
            The new contest id, or None if an open contest exists
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM contests WHERE status = ? LIMIT 1", (STATUS_OPEN,))
            if cursor.fetchone():
                return None
            cursor.execute(
                """
                INSERT INTO contests (
                    month_year, status, bet_price_cents, closing_at, draw_date,
                    total_collected_cents, num_bets, created_at, payout_status
                )
                VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?)
                """,
                (
                    month_year,
                    STATUS_OPEN,
                    bet_price_cents,
                    closing_at,
                    draw_date,
                    seed_cents,
                    self.now(),
                    PAYOUT_UNSETTLED,
                ),
            )
            return cursor.lastrowid

    def get_by_id(self, contest_id: int) -> Contest | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM contests WHERE id = ?", (contest_id,))
            row = cursor.fetchone()
            return self._row_to_contest(row) if row else None

    def get_open(self) -> Contest | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM contests WHERE status = ? ORDER BY id DESC LIMIT 1",
                (STATUS_OPEN,),
            )
            row = cursor.fetchone()
            return self._row_to_contest(row) if row else None

    def get_last_closed(self) -> Contest | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM contests
                WHERE status = ?
                ORDER BY closed_at DESC, id DESC
                LIMIT 1
                """,
                (STATUS_CLOSED,),
            )
            row = cursor.fetchone()
            return self._row_to_contest(row) if row else None

    def list_recent(self, limit: int = 10) -> list[Contest]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM contests ORDER BY id DESC LIMIT ?", (limit,))
            return [self._row_to_contest(row) for row in cursor.fetchall()]

    def close_if_open(self, contest_id: int, winning_numbers: list[int], closed_at: int) -> bool:
        """
        Close the contest and store the draw, only if it is still open.

        Returns:
            True if this call performed the transition
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE contests
                SET status = ?, winning_numbers = ?, closed_at = ?, payout_status = ?
                WHERE id = ? AND status = ?
                """,
                (
                    STATUS_CLOSED,
                    json.dumps(sorted(winning_numbers)),
                    closed_at,
                    PAYOUT_SCORING,
                    contest_id,
                    STATUS_OPEN,
                ),
            )
            return cursor.rowcount > 0

    def record_settlement(
        self,
        contest_id: int,
        winners6: int,
        winners5: int,
        prize_value_cents: int,
        carryover_cents: int,
        payout_status: str,
    ) -> None:
        with self.connection() as conn:
            conn.execute(
                """
                UPDATE contests
                SET winners6 = ?, winners5 = ?, prize_value_cents = ?,
                    carryover_cents = ?, payout_status = ?
                WHERE id = ?
                """,
                (winners6, winners5, prize_value_cents, carryover_cents, payout_status, contest_id),
            )

    def set_payout_status(self, contest_id: int, payout_status: str) -> None:
        with self.connection() as conn:
            conn.execute(
                "UPDATE contests SET payout_status = ? WHERE id = ?",
                (payout_status, contest_id),
            )

    @staticmethod
    def _row_to_contest(row) -> Contest:
        winning = row["winning_numbers"]
        prize_value = row["prize_value_cents"]
        carryover = row["carryover_cents"]
        return Contest(
            id=row["id"],
            month_year=row["month_year"],
            status=row["status"],
            bet_price=from_cents(row["bet_price_cents"]),
            closing_at=int(row["closing_at"]),
            total_collected=from_cents(row["total_collected_cents"]),
            num_bets=int(row["num_bets"] or 0),
            draw_date=row["draw_date"],
            winning_numbers=json.loads(winning) if winning else None,
            created_at=row["created_at"],
            closed_at=row["closed_at"],
            winners6=row["winners6"],
            winners5=row["winners5"],
            prize_value=from_cents(prize_value) if prize_value is not None else None,
            carryover_amount=from_cents(carryover) if carryover is not None else None,
            payout_status=row["payout_status"] or PAYOUT_UNSETTLED,
        )
