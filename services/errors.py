"""
Exception taxonomy for the service layer.

Services raise these internally and convert them into ``Result.fail`` at their
public boundary, using ``code`` as the ``Result.error_code``.
"""

from services import error_codes


class BolaoError(Exception):
    """Base class for every expected, reportable failure."""

    code = error_codes.VALIDATION_ERROR

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ValidationError(BolaoError):
    """Malformed or out-of-range input."""

    code = error_codes.VALIDATION_ERROR


class AuthError(BolaoError):
    """Missing or invalid caller identity."""

    code = error_codes.AUTH_ERROR


class AuthorizationError(BolaoError):
    """Non-admin caller on an admin-only operation."""

    code = error_codes.PERMISSION_DENIED


class NotFoundError(BolaoError):
    code = error_codes.NOT_FOUND


class StateConflictError(BolaoError):
    """Entity is in the wrong lifecycle state for the requested transition."""

    code = error_codes.STATE_ERROR


class InsufficientFundsError(BolaoError):
    code = error_codes.INSUFFICIENT_FUNDS

    def __init__(self, message: str, balance=None, required=None):
        super().__init__(message)
        self.balance = balance
        self.required = required


class ConcurrencyConflictError(BolaoError):
    """An optimistic write lost against a concurrent writer."""

    code = error_codes.CONCURRENCY_CONFLICT


class ExternalServiceError(BolaoError):
    """Payment provider unreachable or returned a non-success response."""

    code = error_codes.EXTERNAL_API_ERROR


class PersistenceError(BolaoError):
    """A write failed after an earlier write in the same operation took effect."""

    code = error_codes.PERSISTENCE_ERROR
