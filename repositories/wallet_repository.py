"""
Repository for wallet balances.
"""

import logging

from repositories.base_repository import BaseRepository
from repositories.interfaces import IWalletRepository

logger = logging.getLogger("bolao.repositories.wallet")


class WalletRepository(BaseRepository, IWalletRepository):
    """
    Reads and conditional writes over the wallets table.

    Debits go through compare_and_set_balance (conditioned on the version the
    caller observed). Credits go through add_balance, a single relative
    update that needs no read.
    """

    def get_wallet(self, user_id: int) -> tuple[int, int] | None:
        """Return (balance_cents, version), or None if the user has no wallet yet."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT balance_cents, version FROM wallets WHERE user_id = ?",
                (user_id,),
            )
            row = cursor.fetchone()
            return (int(row["balance_cents"]), int(row["version"])) if row else None

    def get_balance_cents(self, user_id: int) -> int:
        wallet = self.get_wallet(user_id)
        return wallet[0] if wallet else 0

    def compare_and_set_balance(
        self, user_id: int, expected_version: int, new_balance_cents: int
    ) -> bool:
        """
        Write a new balance only if nobody has touched the wallet since
        ``expected_version`` was read.

        Returns:
            True if the write happened, False if the version moved on
        """
        if new_balance_cents < 0:
            raise ValueError("Balance cannot go negative.")
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE wallets
                SET balance_cents = ?, version = version + 1, updated_at = ?
                WHERE user_id = ? AND version = ?
                """,
                (new_balance_cents, self.now(), user_id, expected_version),
            )
            return cursor.rowcount > 0

    def add_balance(self, user_id: int, delta_cents: int) -> int:
        """
        Add ``delta_cents`` (>= 0) to the balance, creating the wallet if needed.

        Returns:
            The balance after the update, in cents
        """
        if delta_cents < 0:
            raise ValueError("Use compare_and_set_balance to lower a balance.")
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO wallets (user_id, balance_cents, version, updated_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    balance_cents = balance_cents + excluded.balance_cents,
                    version = version + 1,
                    updated_at = excluded.updated_at
                """,
                (user_id, delta_cents, self.now()),
            )
            cursor.execute("SELECT balance_cents FROM wallets WHERE user_id = ?", (user_id,))
            return int(cursor.fetchone()["balance_cents"])
