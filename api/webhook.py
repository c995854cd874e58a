"""
HTTP webhook receiving Mercado Pago payment notifications.

Mercado Pago retries a notification until it gets a 2xx, so:

- ignored, duplicate, malformed and credited events answer 200
- a rejected signature answers 401
- a failure that needs a clean retry (provider unreachable, credit reversed
  after a failed write) answers 5xx
"""

import json
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config import MERCADO_PAGO_WEBHOOK_SECRET
from infrastructure.mercado_pago_client import verify_webhook_signature
from services import error_codes
from services.deposit_service import DepositService

logger = logging.getLogger("bolao.webhook")


def _extract_payment_id(payload: dict, request: Request) -> str | None:
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    # Older IPN-style notifications carry the id in the query string
    return request.query_params.get("data.id") or request.query_params.get("id")


def _extract_event_type(payload: dict, request: Request) -> str | None:
    if isinstance(payload, dict):
        event_type = payload.get("type") or payload.get("topic")
        if event_type:
            return str(event_type)
    return request.query_params.get("type") or request.query_params.get("topic")


def create_app(deposit_service: DepositService, webhook_secret: str | None = MERCADO_PAGO_WEBHOOK_SECRET) -> FastAPI:
    app = FastAPI(title="Bolão webhooks", docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/webhooks/mercado-pago")
    async def mercado_pago_webhook(request: Request):
        body = await request.body()
        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            logger.warning("Ignoring webhook with invalid JSON body")
            return JSONResponse({"status": "ignored", "reason": "invalid json"})
        if not isinstance(payload, dict):
            payload = {}

        event_type = _extract_event_type(payload, request)
        payment_id = _extract_payment_id(payload, request)

        if not verify_webhook_signature(
            request.headers.get("x-signature"),
            request.headers.get("x-request-id"),
            payment_id,
            secret=webhook_secret,
        ):
            logger.warning(f"Rejected webhook with invalid signature (payment {payment_id})")
            return JSONResponse({"status": "unauthorized"}, status_code=401)

        if event_type != "payment":
            logger.debug(f"Ignoring webhook event type {event_type!r}")
            return JSONResponse({"status": "ignored", "reason": "not a payment event"})
        if not payment_id:
            logger.warning("Ignoring payment webhook without a payment id")
            return JSONResponse({"status": "ignored", "reason": "missing payment id"})

        result = await run_in_threadpool(deposit_service.handle_payment_notification, payment_id)
        if result:
            return JSONResponse({"status": result.value.outcome.value, "payment_id": payment_id})

        logger.error(f"Payment {payment_id} not applied [{result.error_code}]: {result.error}")
        status_code = 502 if result.error_code == error_codes.EXTERNAL_API_ERROR else 500
        return JSONResponse({"status": "error", "error": result.error_code}, status_code=status_code)

    return app
