"""
Withdrawal workflow: request -> approve (completed) | reject (failed).

A request only records intent. Money leaves the wallet at approval, after
the balance is checked again, and the pending -> completed write is
conditional so two admins cannot both approve the same request.
"""

import logging
import sqlite3
from dataclasses import dataclass
from decimal import Decimal

from config import WITHDRAWAL_MIN_AMOUNT
from domain.models.caller import Caller
from domain.models.transaction import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PENDING,
    TYPE_WITHDRAWAL,
    Transaction,
)
from repositories.interfaces import ITransactionRepository
from services import error_codes
from services.errors import (
    BolaoError,
    InsufficientFundsError,
    NotFoundError,
    PersistenceError,
    StateConflictError,
    ValidationError,
)
from services.interfaces import IWithdrawalService
from services.notification_service import (
    WITHDRAWAL_APPROVED,
    WITHDRAWAL_REJECTED,
    WITHDRAWAL_REQUESTED,
    NotificationService,
)
from services.permissions import require_admin, require_caller
from services.profile_service import ProfileService
from services.result import Result
from services.wallet_service import WalletService
from utils.money import format_brl, parse_money, to_cents

logger = logging.getLogger("bolao.services.withdrawal")

DEFAULT_REJECT_REASON = "Withdrawal rejected by administrator"


@dataclass
class WithdrawalRequest:
    transaction_id: int
    amount: Decimal
    pix_key: str


@dataclass
class WithdrawalApproval:
    transaction_id: int
    user_id: int
    amount: Decimal
    new_balance: Decimal
    pix_key: str | None = None


@dataclass
class WithdrawalRejection:
    transaction_id: int
    user_id: int
    reason: str


class WithdrawalService(IWithdrawalService):
    def __init__(
        self,
        transaction_repo: ITransactionRepository,
        wallet_service: WalletService,
        profile_service: ProfileService,
        notification_service: NotificationService | None = None,
        min_amount: Decimal = WITHDRAWAL_MIN_AMOUNT,
    ):
        self.transaction_repo = transaction_repo
        self.wallet_service = wallet_service
        self.profile_service = profile_service
        self.notification_service = notification_service
        self.min_amount = min_amount

    def request_withdrawal(self, caller: Caller, amount) -> Result[WithdrawalRequest]:
        """Record a pending withdrawal; the wallet is not touched yet."""
        try:
            user_id = require_caller(caller)
            try:
                value = parse_money(amount)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            if value < self.min_amount:
                raise ValidationError(f"Minimum withdrawal is {format_brl(self.min_amount)}.")

            pix_key = self.profile_service.get_pix_key(user_id)
            if not pix_key:
                raise ValidationError(
                    "Set a PIX key before requesting a withdrawal.", code=error_codes.PAYOUT_KEY_MISSING
                )

            balance = self.wallet_service.get_balance(user_id)
            if balance < value:
                raise InsufficientFundsError(
                    f"Insufficient balance: {format_brl(balance)} available.",
                    balance=balance,
                    required=value,
                )

            if self.transaction_repo.has_pending_withdrawal(user_id):
                raise StateConflictError(
                    "You already have a pending withdrawal.", code=error_codes.WITHDRAWAL_PENDING
                )

            try:
                transaction_id = self.transaction_repo.create(
                    user_id=user_id,
                    type=TYPE_WITHDRAWAL,
                    amount_cents=to_cents(value),
                    status=STATUS_PENDING,
                    description=f"PIX withdrawal to {pix_key}",
                )
            except sqlite3.IntegrityError as exc:
                # Lost the race against a concurrent request (partial unique index)
                raise StateConflictError(
                    "You already have a pending withdrawal.", code=error_codes.WITHDRAWAL_PENDING
                ) from exc
        except BolaoError as exc:
            return Result.from_error(exc)

        logger.info(f"Withdrawal {transaction_id} requested by user {user_id}: {value}")
        if self.notification_service:
            self.notification_service.notify_admins(
                WITHDRAWAL_REQUESTED,
                "Withdrawal requested",
                f"User {caller.label} requested a withdrawal of {format_brl(value)}.",
                data={"transaction_id": transaction_id, "user_id": user_id, "amount": str(value)},
            )
        return Result.ok(WithdrawalRequest(transaction_id=transaction_id, amount=value, pix_key=pix_key))

    def approve_withdrawal(self, caller: Caller, transaction_id: int) -> Result[WithdrawalApproval]:
        """
        Debit the wallet and complete a pending withdrawal.

        If the balance no longer covers the amount, the request is marked
        failed and INSUFFICIENT_FUNDS is returned.
        """
        try:
            admin_id = require_admin(caller)
            tx = self._get_pending(transaction_id)
            user_id = tx.user_id

            balance = self.wallet_service.get_balance(user_id)
            if balance < tx.amount:
                raise self._fail_for_shortfall(tx, balance, admin_id)

            try:
                new_balance = self.wallet_service.debit_with_retry(user_id, tx.amount)
            except InsufficientFundsError as exc:
                # Balance was spent between the check and the debit
                raise self._fail_for_shortfall(tx, exc.balance, admin_id) from exc

            try:
                completed = self.transaction_repo.transition_status(
                    transaction_id, STATUS_PENDING, STATUS_COMPLETED
                )
            except sqlite3.Error as exc:
                logger.error(f"Completing withdrawal {transaction_id} failed: {exc}; refunding user {user_id}")
                self._refund(transaction_id, user_id, tx.amount)
                raise PersistenceError(
                    f"Withdrawal {transaction_id} could not be completed; the debit was reversed."
                ) from exc
            if not completed:
                logger.warning(
                    f"Withdrawal {transaction_id} changed state during approval by admin {admin_id}; "
                    f"refunding user {user_id}"
                )
                self._refund(transaction_id, user_id, tx.amount)
                raise StateConflictError(
                    f"Withdrawal {transaction_id} is no longer pending.",
                    code=error_codes.INVALID_TRANSACTION_STATE,
                )
        except BolaoError as exc:
            return Result.from_error(exc)

        pix_key = self.profile_service.get_pix_key(user_id)
        logger.info(
            f"Withdrawal {transaction_id} approved by admin {admin_id}: {tx.amount} for user {user_id} "
            f"to PIX key {pix_key}"
        )
        if self.notification_service:
            self.notification_service.notify_user(
                user_id,
                WITHDRAWAL_APPROVED,
                "Withdrawal approved",
                f"Your withdrawal of {format_brl(tx.amount)} was approved and sent to PIX key {pix_key}.",
                data={"transaction_id": transaction_id, "amount": str(tx.amount)},
            )
        return Result.ok(
            WithdrawalApproval(
                transaction_id=transaction_id,
                user_id=user_id,
                amount=tx.amount,
                new_balance=new_balance,
                pix_key=pix_key,
            )
        )

    def reject_withdrawal(
        self, caller: Caller, transaction_id: int, reason: str | None = None
    ) -> Result[WithdrawalRejection]:
        try:
            admin_id = require_admin(caller)
            tx = self._get_pending(transaction_id)
            reason = (reason or "").strip() or DEFAULT_REJECT_REASON
            if not self.transaction_repo.transition_status(
                transaction_id, STATUS_PENDING, STATUS_FAILED, description=reason
            ):
                raise StateConflictError(
                    f"Withdrawal {transaction_id} is no longer pending.",
                    code=error_codes.INVALID_TRANSACTION_STATE,
                )
        except BolaoError as exc:
            return Result.from_error(exc)

        logger.info(f"Withdrawal {transaction_id} for user {tx.user_id} rejected by admin {admin_id}: {reason}")
        if self.notification_service:
            self.notification_service.notify_user(
                tx.user_id,
                WITHDRAWAL_REJECTED,
                "Withdrawal rejected",
                f"Your withdrawal of {format_brl(tx.amount)} was rejected: {reason}",
                data={"transaction_id": transaction_id, "reason": reason},
            )
        return Result.ok(WithdrawalRejection(transaction_id=transaction_id, user_id=tx.user_id, reason=reason))

    def get_pending_withdrawals(self, caller: Caller, limit: int = 25) -> Result[list[Transaction]]:
        try:
            require_admin(caller)
        except BolaoError as exc:
            return Result.from_error(exc)
        return Result.ok(self.transaction_repo.get_pending_withdrawals(limit))

    def _get_pending(self, transaction_id: int) -> Transaction:
        tx = self.transaction_repo.get_by_id(transaction_id)
        if tx is None:
            raise NotFoundError(
                f"Transaction {transaction_id} not found.", code=error_codes.TRANSACTION_NOT_FOUND
            )
        if not tx.is_pending_withdrawal:
            raise StateConflictError(
                f"Transaction {transaction_id} is not a pending withdrawal (status: {tx.status}).",
                code=error_codes.INVALID_TRANSACTION_STATE,
            )
        return tx

    def _fail_for_shortfall(self, tx: Transaction, balance: Decimal, admin_id: int) -> InsufficientFundsError:
        """Mark a pending withdrawal failed because the wallet no longer covers it."""
        self.transaction_repo.transition_status(
            tx.id,
            STATUS_PENDING,
            STATUS_FAILED,
            description=f"Insufficient balance at approval ({format_brl(balance)})",
        )
        logger.warning(
            f"Withdrawal {tx.id} for user {tx.user_id} failed at approval by admin {admin_id}: "
            f"balance {balance} < {tx.amount}"
        )
        return InsufficientFundsError(
            f"User balance ({format_brl(balance)}) no longer covers {format_brl(tx.amount)}.",
            balance=balance,
            required=tx.amount,
        )

    def _refund(self, transaction_id: int, user_id: int, amount: Decimal) -> None:
        try:
            self.wallet_service.credit(user_id, amount)
        except Exception as exc:
            logger.critical(
                f"Refund of {amount} to user {user_id} for withdrawal {transaction_id} failed; "
                "manual reconciliation needed",
                exc_info=True,
            )
            raise PersistenceError(
                f"Withdrawal {transaction_id} failed and the refund could not be applied."
            ) from exc
