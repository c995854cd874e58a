"""
Repository for the wallet transaction history.
"""

import logging
import sqlite3

from domain.models.transaction import (
    STATUS_COMPLETED,
    STATUS_PENDING,
    TYPE_DEPOSIT,
    TYPE_WITHDRAWAL,
    VALID_STATUSES,
    VALID_TYPES,
    Transaction,
)
from repositories.base_repository import BaseRepository
from repositories.interfaces import ITransactionRepository
from utils.money import from_cents

logger = logging.getLogger("bolao.repositories.transaction")


class TransactionRepository(BaseRepository, ITransactionRepository):
    """
    Handles the transactions table.

    Status changes are conditional on the current status so two concurrent
    admin actions on the same withdrawal cannot both apply.
    """

    def create(
        self,
        user_id: int,
        type: str,
        amount_cents: int,
        status: str,
        description: str | None = None,
        payment_id: str | None = None,
        contest_id: int | None = None,
        bet_id: int | None = None,
    ) -> int:
        if type not in VALID_TYPES:
            raise ValueError(f"Invalid transaction type: {type}")
        if status not in VALID_STATUSES:
            raise ValueError(f"Invalid transaction status: {status}")
        now = self.now()
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO transactions (
                    user_id, type, amount_cents, status, description,
                    payment_id, contest_id, bet_id, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    type,
                    amount_cents,
                    status,
                    description,
                    payment_id,
                    contest_id,
                    bet_id,
                    now,
                    now,
                ),
            )
            return cursor.lastrowid

    def get_by_id(self, transaction_id: int) -> Transaction | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM transactions WHERE id = ?", (transaction_id,))
            row = cursor.fetchone()
            return self._row_to_transaction(row) if row else None

    def get_by_payment_id(self, payment_id: str) -> Transaction | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM transactions WHERE payment_id = ?", (payment_id,))
            row = cursor.fetchone()
            return self._row_to_transaction(row) if row else None

    def has_pending_withdrawal(self, user_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT 1 FROM transactions WHERE user_id = ? AND type = ? AND status = ? LIMIT 1",
                (user_id, TYPE_WITHDRAWAL, STATUS_PENDING),
            )
            return cursor.fetchone() is not None

    def get_pending_withdrawals(self, limit: int = 25) -> list[Transaction]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM transactions
                WHERE type = ? AND status = ?
                ORDER BY created_at, id
                LIMIT ?
                """,
                (TYPE_WITHDRAWAL, STATUS_PENDING, limit),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def transition_status(
        self,
        transaction_id: int,
        expected_status: str,
        new_status: str,
        description: str | None = None,
    ) -> bool:
        """
        Move a transaction from ``expected_status`` to ``new_status``.

        The description is replaced only when one is given.

        Returns:
            True if the row was in ``expected_status`` and got updated
        """
        if new_status not in VALID_STATUSES:
            raise ValueError(f"Invalid transaction status: {new_status}")
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE transactions
                SET status = ?, description = COALESCE(?, description), updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (new_status, description, self.now(), transaction_id, expected_status),
            )
            return cursor.rowcount > 0

    def complete_deposit(
        self, payment_id: str, user_id: int, amount_cents: int, description: str
    ) -> bool:
        """
        Mark the deposit for ``payment_id`` completed, inserting it if the
        pending row was never recorded.

        Returns:
            False if a completed deposit already exists for ``payment_id``
        """
        now = self.now()
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE transactions
                SET status = ?, user_id = ?, amount_cents = ?, description = ?, updated_at = ?
                WHERE payment_id = ? AND type = ? AND status != ?
                """,
                (
                    STATUS_COMPLETED,
                    user_id,
                    amount_cents,
                    description,
                    now,
                    payment_id,
                    TYPE_DEPOSIT,
                    STATUS_COMPLETED,
                ),
            )
            if cursor.rowcount > 0:
                return True

            try:
                cursor.execute(
                    """
                    INSERT INTO transactions (
                        user_id, type, amount_cents, status, description,
                        payment_id, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        TYPE_DEPOSIT,
                        amount_cents,
                        STATUS_COMPLETED,
                        description,
                        payment_id,
                        now,
                        now,
                    ),
                )
            except sqlite3.IntegrityError:
                # payment_id already taken by a completed row
                return False
            return True

    def get_user_transactions(self, user_id: int, limit: int = 10) -> list[Transaction]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM transactions
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (user_id, limit),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    @staticmethod
    def _row_to_transaction(row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            type=row["type"],
            amount=from_cents(row["amount_cents"]),
            status=row["status"],
            description=row["description"],
            payment_id=row["payment_id"],
            contest_id=row["contest_id"],
            bet_id=row["bet_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
