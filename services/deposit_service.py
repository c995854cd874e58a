"""
Deposits: creating PIX charges and crediting confirmed payments.

Confirmations arrive at least once (provider retries), so crediting is keyed
by the provider's payment id: a completed deposit row with that id means the
event was already applied.
"""

import logging
import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from config import DEPOSIT_MIN_AMOUNT, PAYER_EMAIL_DOMAIN
from domain.models.caller import Caller
from domain.models.payment import PaymentConfirmation, PaymentStatus
from domain.models.transaction import STATUS_COMPLETED, STATUS_PENDING, TYPE_DEPOSIT
from infrastructure.mercado_pago_client import MercadoPagoClient, PaymentProviderError
from repositories.interfaces import ITransactionRepository
from services.errors import BolaoError, ExternalServiceError, PersistenceError, ValidationError
from services.interfaces import IDepositService
from services.notification_service import DEPOSIT_CONFIRMED, NotificationService
from services.permissions import require_caller
from services.result import Result
from services.wallet_service import WalletService
from utils.money import format_brl, parse_money, to_cents

logger = logging.getLogger("bolao.services.deposit")


class DepositOutcome(Enum):
    CREDITED = "credited"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


@dataclass
class DepositIntent:
    payment_reference: str
    amount: Decimal
    pix_copy_paste: str | None
    ticket_url: str | None
    qr_code_base64: str | None = None
    expires_at: str | None = None

    @property
    def payout_instructions(self) -> str:
        lines = [f"Pay {format_brl(self.amount)} with PIX."]
        if self.pix_copy_paste:
            lines.append(f"Copy-and-paste code: {self.pix_copy_paste}")
        if self.ticket_url:
            lines.append(f"Payment page: {self.ticket_url}")
        if self.expires_at:
            lines.append(f"Expires at: {self.expires_at}")
        return "\n".join(lines)


@dataclass
class DepositResult:
    outcome: DepositOutcome
    payment_id: str
    user_id: int | None = None
    amount: Decimal | None = None
    new_balance: Decimal | None = None


class DepositService(IDepositService):
    def __init__(
        self,
        transaction_repo: ITransactionRepository,
        wallet_service: WalletService,
        payment_client: MercadoPagoClient,
        notification_service: NotificationService | None = None,
        min_amount: Decimal = DEPOSIT_MIN_AMOUNT,
        payer_email_domain: str = PAYER_EMAIL_DOMAIN,
    ):
        self.transaction_repo = transaction_repo
        self.wallet_service = wallet_service
        self.payment_client = payment_client
        self.notification_service = notification_service
        self.min_amount = min_amount
        self.payer_email_domain = payer_email_domain

    def create_deposit_request(
        self, caller: Caller, amount, description: str | None = None
    ) -> Result[DepositIntent]:
        """
        Create a PIX charge for the caller. The wallet is credited later, when
        the provider confirms the payment.
        """
        try:
            user_id = require_caller(caller)
            try:
                value = parse_money(amount)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            if value < self.min_amount:
                raise ValidationError(f"Minimum deposit is {format_brl(self.min_amount)}.")

            first_name, _, last_name = (caller.display_name or "").partition(" ")
            try:
                intent = self.payment_client.create_pix_payment(
                    amount=value,
                    user_id=user_id,
                    description=description or "Bolão wallet deposit",
                    payer_email=f"user{user_id}@{self.payer_email_domain}",
                    payer_first_name=first_name or None,
                    payer_last_name=last_name or None,
                )
            except PaymentProviderError as exc:
                raise ExternalServiceError(
                    "The payment provider is unavailable right now. Please try again later."
                ) from exc
        except BolaoError as exc:
            return Result.from_error(exc)

        try:
            self.transaction_repo.create(
                user_id=user_id,
                type=TYPE_DEPOSIT,
                amount_cents=to_cents(value),
                status=STATUS_PENDING,
                description=description or "PIX deposit",
                payment_id=intent.payment_id,
            )
        except sqlite3.Error:
            # The charge exists; the confirmation inserts the row if it is missing
            logger.exception(f"Could not record pending deposit {intent.payment_id} for user {user_id}")

        logger.info(f"Deposit {intent.payment_id} of {value} created for user {user_id}")
        return Result.ok(
            DepositIntent(
                payment_reference=intent.payment_id,
                amount=value,
                pix_copy_paste=intent.qr_code,
                ticket_url=intent.ticket_url,
                qr_code_base64=intent.qr_code_base64,
                expires_at=intent.expires_at,
            )
        )

    def handle_payment_notification(self, payment_id: str) -> Result[DepositResult]:
        """
        Fetch a payment the provider told us about, normalize it, and apply it.
        """
        try:
            try:
                payment = self.payment_client.get_payment(payment_id)
            except PaymentProviderError as exc:
                raise ExternalServiceError(f"Could not fetch payment {payment_id}.") from exc
            try:
                confirmation = PaymentConfirmation.from_provider_payment(payment)
            except ValueError as exc:
                logger.warning(f"Ignoring malformed payment {payment_id}: {exc}")
                return Result.ok(DepositResult(outcome=DepositOutcome.IGNORED, payment_id=str(payment_id)))
        except BolaoError as exc:
            return Result.from_error(exc)
        return self.on_payment_confirmed(confirmation)

    def on_payment_confirmed(self, confirmation: PaymentConfirmation) -> Result[DepositResult]:
        """
        Credit an approved payment exactly once.

        Non-approved events and repeats are successful no-ops. A failure
        after the credit reverses it and returns PERSISTENCE_ERROR so the
        provider's retry starts clean.
        """
        payment_id = confirmation.payment_id
        user_id = confirmation.user_id
        amount = confirmation.amount

        if confirmation.status != PaymentStatus.APPROVED:
            logger.info(
                f"Payment {payment_id} for user {user_id} has status {confirmation.raw_status}; ignoring"
            )
            return Result.ok(DepositResult(DepositOutcome.IGNORED, payment_id, user_id, amount))

        try:
            existing = self.transaction_repo.get_by_payment_id(payment_id)
            if existing is not None and existing.status == STATUS_COMPLETED:
                logger.info(f"Payment {payment_id} already credited; duplicate delivery")
                return Result.ok(DepositResult(DepositOutcome.DUPLICATE, payment_id, user_id, amount))
            if existing is not None and existing.user_id != user_id:
                logger.warning(
                    f"Payment {payment_id} was requested by user {existing.user_id} "
                    f"but references user {user_id}; crediting the referenced user"
                )

            try:
                new_balance = self.wallet_service.credit(user_id, amount)
            except sqlite3.Error as exc:
                logger.error(f"Credit for payment {payment_id} (user {user_id}) failed: {exc}")
                raise PersistenceError(f"Could not credit payment {payment_id}.") from exc

            try:
                recorded = self.transaction_repo.complete_deposit(
                    payment_id, user_id, to_cents(amount), f"PIX deposit {payment_id}"
                )
            except sqlite3.Error as exc:
                logger.error(f"Recording payment {payment_id} failed after credit: {exc}; reversing")
                self._reverse_credit(payment_id, user_id, amount)
                raise PersistenceError(
                    f"Payment {payment_id} could not be recorded; the credit was reversed."
                ) from exc

            if not recorded:
                # A concurrent delivery completed it between our check and write
                self._reverse_credit(payment_id, user_id, amount)
                logger.info(f"Payment {payment_id} completed concurrently; duplicate delivery")
                return Result.ok(DepositResult(DepositOutcome.DUPLICATE, payment_id, user_id, amount))
        except BolaoError as exc:
            return Result.from_error(exc)

        logger.info(f"Credited payment {payment_id}: {amount} to user {user_id}")
        if self.notification_service:
            self.notification_service.notify_user(
                user_id,
                DEPOSIT_CONFIRMED,
                "Deposit confirmed",
                f"Your deposit of {format_brl(amount)} was credited.",
                data={"payment_id": payment_id, "amount": str(amount)},
            )
        return Result.ok(DepositResult(DepositOutcome.CREDITED, payment_id, user_id, amount, new_balance))

    def _reverse_credit(self, payment_id: str, user_id: int, amount: Decimal) -> None:
        try:
            self.wallet_service.debit_with_retry(user_id, amount)
        except Exception as exc:
            logger.critical(
                f"Could not reverse credit of {amount} for payment {payment_id} (user {user_id}); "
                "manual reconciliation needed",
                exc_info=True,
            )
            raise PersistenceError(
                f"Payment {payment_id} left an unreconciled credit; an admin has been alerted."
            ) from exc
