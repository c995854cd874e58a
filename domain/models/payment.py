"""
Payment provider models.

Inbound provider payloads are loosely typed; everything the deposit flow
branches on goes through PaymentConfirmation and PaymentStatus first.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from utils.money import parse_money


class PaymentStatus(Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"
    UNKNOWN = "unknown"

    @classmethod
    def from_provider(cls, raw: Any) -> "PaymentStatus":
        """Map a Mercado Pago payment status onto the internal variant."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        return _PROVIDER_STATUS_MAP.get(raw.strip().lower(), cls.UNKNOWN)


_PROVIDER_STATUS_MAP = {
    "approved": PaymentStatus.APPROVED,
    "accredited": PaymentStatus.APPROVED,
    "pending": PaymentStatus.PENDING,
    "in_process": PaymentStatus.PENDING,
    "in_mediation": PaymentStatus.PENDING,
    "authorized": PaymentStatus.PENDING,
    "rejected": PaymentStatus.REJECTED,
    "cancelled": PaymentStatus.REJECTED,
    "refunded": PaymentStatus.REJECTED,
    "charged_back": PaymentStatus.REJECTED,
}


@dataclass(frozen=True)
class PaymentConfirmation:
    """A normalized payment-confirmation event."""

    payment_id: str
    user_id: int
    amount: Decimal
    status: PaymentStatus
    raw_status: str | None = None

    @classmethod
    def from_provider_payment(cls, payment: dict[str, Any]) -> "PaymentConfirmation":
        """
        Build a confirmation from a Mercado Pago payment resource.

        The user id travels in ``external_reference`` (set when the payment
        was created).

        Raises:
            ValueError: if the id, user reference or amount is missing or malformed
        """
        if not isinstance(payment, dict):
            raise ValueError("Payment payload must be an object.")

        payment_id = payment.get("id")
        if payment_id is None or str(payment_id).strip() == "":
            raise ValueError("Payment payload has no id.")

        reference = payment.get("external_reference")
        try:
            user_id = int(str(reference).strip())
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Payment {payment_id} has no valid user reference.") from exc

        raw_amount = payment.get("transaction_amount")
        if raw_amount is None:
            raise ValueError(f"Payment {payment_id} has no amount.")
        amount = parse_money(raw_amount)
        if amount <= 0:
            raise ValueError(f"Payment {payment_id} has a non-positive amount.")

        raw_status = payment.get("status")
        return cls(
            payment_id=str(payment_id).strip(),
            user_id=user_id,
            amount=amount,
            status=PaymentStatus.from_provider(raw_status),
            raw_status=raw_status if isinstance(raw_status, str) else None,
        )


@dataclass(frozen=True)
class PaymentIntent:
    """A payable PIX charge issued by the provider."""

    payment_id: str
    amount: Decimal
    status: PaymentStatus
    qr_code: str | None = None
    qr_code_base64: str | None = None
    ticket_url: str | None = None
    expires_at: str | None = None
