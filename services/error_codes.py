"""
Standard error codes for service layer.

These error codes allow command handlers and the webhook to programmatically
handle specific error conditions without parsing error message text.

Usage:
    from services.error_codes import NOT_FOUND, INSUFFICIENT_FUNDS
    from services.result import Result

    if contest is None:
        return Result.fail("Contest not found", code=NOT_FOUND)
"""

# General errors
NOT_FOUND = "not_found"
VALIDATION_ERROR = "validation_error"
STATE_ERROR = "state_error"
AUTH_ERROR = "auth_error"
PERMISSION_DENIED = "permission_denied"
RATE_LIMITED = "rate_limited"

# Ledger errors
INSUFFICIENT_FUNDS = "insufficient_funds"
CONCURRENCY_CONFLICT = "concurrency_conflict"
PERSISTENCE_ERROR = "persistence_error"

# Contest / betting errors
CONTEST_NOT_FOUND = "contest_not_found"
CONTEST_CLOSED = "contest_closed"
CONTEST_ALREADY_OPEN = "contest_already_open"
ALREADY_BET = "already_bet"
ALREADY_SETTLED = "already_settled"

# Withdrawal errors
TRANSACTION_NOT_FOUND = "transaction_not_found"
WITHDRAWAL_PENDING = "withdrawal_pending"
INVALID_TRANSACTION_STATE = "invalid_transaction_state"
PAYOUT_KEY_MISSING = "payout_key_missing"

# Payment provider errors
EXTERNAL_API_ERROR = "external_api_error"
