"""
Centralized configuration for the Bolão pool bot.
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_decimal(env_var: str, default: str) -> Decimal:
    raw = os.getenv(env_var)
    if raw is None:
        return Decimal(default)
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        return Decimal(default)


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


DB_PATH = os.getenv("DB_PATH", "bolao.db")
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
ADMIN_USER_IDS: list[int] = []

_admin_env = os.getenv("ADMIN_USER_IDS", "")
if _admin_env:
    try:
        ADMIN_USER_IDS = [int(uid.strip()) for uid in _admin_env.split(",") if uid.strip()]
    except ValueError:
        ADMIN_USER_IDS = []

# Contest defaults
DEFAULT_BET_PRICE = _parse_decimal("DEFAULT_BET_PRICE", "5.00")
PICK_SIZE = 6
DRAW_SIZE = 20

# Wallet limits
DEPOSIT_MIN_AMOUNT = _parse_decimal("DEPOSIT_MIN_AMOUNT", "5.00")
WITHDRAWAL_MIN_AMOUNT = _parse_decimal("WITHDRAWAL_MIN_AMOUNT", "10.00")

# Optimistic concurrency: how many times a conflicting debit is retried
LEDGER_DEBIT_MAX_ATTEMPTS = _parse_int("LEDGER_DEBIT_MAX_ATTEMPTS", 3)

# Tier defaults (used until an admin saves a configuration)
DEFAULT_HOUSE_SHARE = _parse_decimal("DEFAULT_HOUSE_SHARE", "20")
DEFAULT_SIX_HITS_SHARE = _parse_decimal("DEFAULT_SIX_HITS_SHARE", "80")
DEFAULT_FIVE_HITS_SHARE = _parse_decimal("DEFAULT_FIVE_HITS_SHARE", "20")

# Mercado Pago (PIX) integration
MERCADO_PAGO_ACCESS_TOKEN = os.getenv("MERCADO_PAGO_ACCESS_TOKEN")
MERCADO_PAGO_BASE_URL = os.getenv("MERCADO_PAGO_BASE_URL", "https://api.mercadopago.com")
MERCADO_PAGO_NOTIFICATION_URL = os.getenv("MERCADO_PAGO_NOTIFICATION_URL")
MERCADO_PAGO_WEBHOOK_SECRET = os.getenv("MERCADO_PAGO_WEBHOOK_SECRET")
MERCADO_PAGO_TIMEOUT_SECONDS = _parse_float("MERCADO_PAGO_TIMEOUT_SECONDS", 15.0)
# Discord users have no e-mail; the provider requires one for the payer
PAYER_EMAIL_DOMAIN = os.getenv("PAYER_EMAIL_DOMAIN", "bolao.invalid")

# Webhook server (runs inside the bot's event loop)
WEBHOOK_ENABLED = _parse_bool("WEBHOOK_ENABLED", True)
WEBHOOK_HOST = os.getenv("WEBHOOK_HOST", "0.0.0.0")
WEBHOOK_PORT = _parse_int("WEBHOOK_PORT", 8080)
