"""
Repository for managing betting data.
"""

import json
import logging

from domain.models.bet import Bet
from domain.models.transaction import STATUS_COMPLETED, TYPE_BET
from repositories.base_repository import BaseRepository
from repositories.interfaces import IBetRepository
from utils.money import from_cents

logger = logging.getLogger("bolao.repositories.bet")


class BetRepository(BaseRepository, IBetRepository):
    """
    Handles CRUD operations against the bets table.

    UNIQUE(contest_id, user_id) is what actually enforces one bet per user
    per contest; place_bet_atomic() lets the IntegrityError through to the caller.
    """

    def place_bet_atomic(
        self,
        contest_id: int,
        user_id: int,
        chosen_numbers: list[int],
        amount_cents: int,
        description: str | None = None,
    ) -> tuple[int, int] | None:
        """
        Record a bet, its ledger entry and the pool increment as one write.

        The contest row is bumped first under the write lock, conditioned on
        status = 'open', so a concurrent close either sees the whole bet
        (stake included in the pool) or none of it.

        Returns:
            (bet_id, transaction_id), or None if the contest is not open

        Raises:
            sqlite3.IntegrityError: the user already has a bet in this contest
        """
        now = self.now()
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE contests
                SET total_collected_cents = total_collected_cents + ?,
                    num_bets = num_bets + 1
                WHERE id = ? AND status = 'open'
                """,
                (amount_cents, contest_id),
            )
            if cursor.rowcount == 0:
                return None

            cursor.execute(
                """
                INSERT INTO bets (contest_id, user_id, chosen_numbers, amount_cents, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (contest_id, user_id, json.dumps(sorted(chosen_numbers)), amount_cents, now),
            )
            bet_id = cursor.lastrowid

            cursor.execute(
                """
                INSERT INTO transactions (
                    user_id, type, amount_cents, status, description,
                    contest_id, bet_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    TYPE_BET,
                    -amount_cents,
                    STATUS_COMPLETED,
                    description,
                    contest_id,
                    bet_id,
                    now,
                    now,
                ),
            )
            return bet_id, cursor.lastrowid

    def get_by_id(self, bet_id: int) -> Bet | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM bets WHERE id = ?", (bet_id,))
            row = cursor.fetchone()
            return self._row_to_bet(row) if row else None

    def get_user_bet(self, contest_id: int, user_id: int) -> Bet | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM bets WHERE contest_id = ? AND user_id = ?",
                (contest_id, user_id),
            )
            row = cursor.fetchone()
            return self._row_to_bet(row) if row else None

    def get_for_contest(self, contest_id: int) -> list[Bet]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM bets WHERE contest_id = ? ORDER BY id", (contest_id,))
            return [self._row_to_bet(row) for row in cursor.fetchall()]

    def get_user_bets(self, user_id: int, limit: int = 10) -> list[Bet]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM bets WHERE user_id = ? ORDER BY id DESC LIMIT ?",
                (user_id, limit),
            )
            return [self._row_to_bet(row) for row in cursor.fetchall()]

    def record_hits(self, hits_by_bet_id: dict[int, int]) -> None:
        """Persist hit counts for a whole contest in one transaction."""
        if not hits_by_bet_id:
            return
        with self.atomic_transaction() as conn:
            conn.executemany(
                "UPDATE bets SET hits = ? WHERE id = ?",
                [(hits, bet_id) for bet_id, hits in hits_by_bet_id.items()],
            )

    def assign_prizes(self, prize_cents_by_bet_id: dict[int, int]) -> None:
        """Record the prize owed to each winning bet; prize_paid is left alone."""
        if not prize_cents_by_bet_id:
            return
        with self.atomic_transaction() as conn:
            conn.executemany(
                "UPDATE bets SET prize_amount_cents = ? WHERE id = ?",
                [(cents, bet_id) for bet_id, cents in prize_cents_by_bet_id.items()],
            )

    def claim_prize(self, bet_id: int) -> bool:
        """
        Mark a prize as paid before the money moves.

        Returns:
            True if this call flipped prize_paid, False if already claimed
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE bets SET prize_paid = 1
                WHERE id = ? AND prize_paid = 0 AND prize_amount_cents IS NOT NULL
                """,
                (bet_id,),
            )
            return cursor.rowcount > 0

    def release_prize_claim(self, bet_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE bets SET prize_paid = 0 WHERE id = ? AND prize_paid = 1",
                (bet_id,),
            )
            return cursor.rowcount > 0

    def get_unpaid_winners(self, contest_id: int) -> list[Bet]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM bets
                WHERE contest_id = ? AND prize_amount_cents IS NOT NULL AND prize_paid = 0
                ORDER BY id
                """,
                (contest_id,),
            )
            return [self._row_to_bet(row) for row in cursor.fetchall()]

    def count_with_min_hits(self, contest_id: int, min_hits: int) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS n FROM bets WHERE contest_id = ? AND hits >= ?",
                (contest_id, min_hits),
            )
            return int(cursor.fetchone()["n"])

    @staticmethod
    def _row_to_bet(row) -> Bet:
        prize = row["prize_amount_cents"]
        return Bet(
            id=row["id"],
            contest_id=row["contest_id"],
            user_id=row["user_id"],
            chosen_numbers=json.loads(row["chosen_numbers"]),
            amount=from_cents(row["amount_cents"]),
            hits=row["hits"],
            prize_amount=from_cents(prize) if prize is not None else None,
            prize_paid=bool(row["prize_paid"]),
            created_at=row["created_at"],
        )
