"""
Mercado Pago REST client for PIX payments.
"""

import hashlib
import hmac
import logging
import uuid
from decimal import Decimal
from typing import Any

import requests

from config import (
    MERCADO_PAGO_ACCESS_TOKEN,
    MERCADO_PAGO_BASE_URL,
    MERCADO_PAGO_NOTIFICATION_URL,
    MERCADO_PAGO_TIMEOUT_SECONDS,
    MERCADO_PAGO_WEBHOOK_SECRET,
)
from domain.models.payment import PaymentIntent, PaymentStatus

logger = logging.getLogger("bolao.mercado_pago")


class PaymentProviderError(Exception):
    """The provider was unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MercadoPagoClient:
    """
    Thin wrapper over the two payment endpoints the pool needs:
    create a PIX payment and fetch a payment by id.
    """

    def __init__(
        self,
        access_token: str | None = MERCADO_PAGO_ACCESS_TOKEN,
        base_url: str = MERCADO_PAGO_BASE_URL,
        notification_url: str | None = MERCADO_PAGO_NOTIFICATION_URL,
        timeout: float = MERCADO_PAGO_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.notification_url = notification_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    def _headers(self, idempotency_key: str | None = None) -> dict[str, str]:
        if not self.access_token:
            raise PaymentProviderError("MERCADO_PAGO_ACCESS_TOKEN is not set")
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error(f"Mercado Pago {method} {path} failed: {exc}")
            raise PaymentProviderError(f"Payment provider unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.error(f"Mercado Pago {method} {path} returned {response.status_code}: {response.text[:500]}")
            raise PaymentProviderError(
                f"Payment provider returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise PaymentProviderError("Payment provider returned invalid JSON") from exc

    def create_pix_payment(
        self,
        amount: Decimal,
        user_id: int,
        description: str,
        payer_email: str,
        payer_first_name: str | None = None,
        payer_last_name: str | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentIntent:
        """
        Create a PIX charge. ``external_reference`` carries the user id so the
        confirmation can be routed back to the wallet.
        """
        payload: dict[str, Any] = {
            "transaction_amount": float(amount),
            "description": description,
            "payment_method_id": "pix",
            "external_reference": str(user_id),
            "payer": {"email": payer_email},
        }
        if payer_first_name:
            payload["payer"]["first_name"] = payer_first_name
        if payer_last_name:
            payload["payer"]["last_name"] = payer_last_name
        if self.notification_url:
            payload["notification_url"] = self.notification_url

        data = self._request(
            "POST",
            "/v1/payments",
            json=payload,
            headers=self._headers(idempotency_key or str(uuid.uuid4())),
        )
        if "id" not in data:
            raise PaymentProviderError("Payment provider response has no payment id")

        transaction_data = (data.get("point_of_interaction") or {}).get("transaction_data") or {}
        return PaymentIntent(
            payment_id=str(data["id"]),
            amount=amount,
            status=PaymentStatus.from_provider(data.get("status")),
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=transaction_data.get("qr_code_base64"),
            ticket_url=transaction_data.get("ticket_url"),
            expires_at=data.get("date_of_expiration"),
        )

    def get_payment(self, payment_id: str) -> dict[str, Any]:
        return self._request("GET", f"/v1/payments/{payment_id}", headers=self._headers())


def verify_webhook_signature(
    signature_header: str | None,
    request_id: str | None,
    data_id: str | None,
    secret: str | None = MERCADO_PAGO_WEBHOOK_SECRET,
) -> bool:
    """
    Check an ``x-signature`` header ("ts=...,v1=...") against the HMAC-SHA256
    of the manifest ``id:{data.id};request-id:{x-request-id};ts:{ts};``.

    Returns True when no secret is configured.
    """
    if not secret:
        return True
    if not signature_header:
        return False

    parts = {}
    for chunk in signature_header.split(","):
        key, _, value = chunk.strip().partition("=")
        parts[key.strip()] = value.strip()
    ts = parts.get("ts")
    received = parts.get("v1")
    if not ts or not received:
        return False

    manifest = ""
    if data_id:
        manifest += f"id:{str(data_id).lower()};"
    if request_id:
        manifest += f"request-id:{request_id};"
    manifest += f"ts:{ts};"

    expected = hmac.new(secret.encode(), manifest.encode(), hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, received)
