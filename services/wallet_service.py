"""
Wallet ledger: balance reads and checked debit/credit primitives.

These primitives raise typed errors instead of returning Result; they are
building blocks for the bet, settlement, withdrawal and deposit sagas, which
own the Result boundary.
"""

import logging
from decimal import Decimal

from config import LEDGER_DEBIT_MAX_ATTEMPTS
from repositories.interfaces import IWalletRepository
from services.errors import ConcurrencyConflictError, InsufficientFundsError, ValidationError
from services.interfaces import IWalletService
from utils.money import ZERO, format_brl, from_cents, round_money, to_cents

logger = logging.getLogger("bolao.services.wallet")


class WalletService(IWalletService):
    def __init__(
        self,
        wallet_repo: IWalletRepository,
        max_debit_attempts: int = LEDGER_DEBIT_MAX_ATTEMPTS,
    ):
        self.wallet_repo = wallet_repo
        self.max_debit_attempts = max(1, max_debit_attempts)

    def get_balance(self, user_id: int) -> Decimal:
        return from_cents(self.wallet_repo.get_balance_cents(user_id))

    def debit(self, user_id: int, amount: Decimal) -> Decimal:
        """
        Take ``amount`` out of the wallet with a single optimistic write.

        Returns:
            The new balance

        Raises:
            ValidationError: amount is not positive
            InsufficientFundsError: balance < amount
            ConcurrencyConflictError: the wallet changed between read and write
        """
        amount = round_money(amount)
        if amount <= ZERO:
            raise ValidationError("Debit amount must be positive.")

        wallet = self.wallet_repo.get_wallet(user_id)
        balance_cents, version = wallet if wallet else (0, None)
        if balance_cents < to_cents(amount):
            balance = from_cents(balance_cents)
            raise InsufficientFundsError(
                f"Insufficient balance: {format_brl(balance)} available, {format_brl(amount)} needed.",
                balance=balance,
                required=amount,
            )

        new_cents = balance_cents - to_cents(amount)
        if not self.wallet_repo.compare_and_set_balance(user_id, version, new_cents):
            raise ConcurrencyConflictError("Wallet was modified concurrently; try again.")
        return from_cents(new_cents)

    def debit_with_retry(self, user_id: int, amount: Decimal) -> Decimal:
        """
        debit(), retried on ConcurrencyConflictError up to the configured
        number of attempts. The balance is re-read on every attempt.
        """
        for attempt in range(1, self.max_debit_attempts + 1):
            try:
                return self.debit(user_id, amount)
            except ConcurrencyConflictError:
                if attempt == self.max_debit_attempts:
                    logger.warning(
                        f"Debit of {amount} for user {user_id} lost {attempt} optimistic writes; giving up"
                    )
                    raise
                logger.debug(f"Debit conflict for user {user_id} (attempt {attempt}), retrying")
        raise ConcurrencyConflictError("Wallet was modified concurrently; try again.")

    def credit(self, user_id: int, amount: Decimal) -> Decimal:
        """
        Add ``amount`` (>= 0) to the wallet, creating it if needed.

        Returns:
            The new balance
        """
        amount = round_money(amount)
        if amount < ZERO:
            raise ValidationError("Credit amount cannot be negative.")
        return from_cents(self.wallet_repo.add_balance(user_id, to_cents(amount)))
