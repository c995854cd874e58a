"""
Service layer interfaces (ABCs).

These abstract base classes define the contracts for the services in the
application. Services inherit from their interface so command handlers and
tests can depend on the contract rather than the concrete class.

Usage:
    class MyService(IMyService):
        def my_method(self, param: str) -> Result[dict]:
            ...
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from domain.models.caller import Caller
    from domain.models.contest import Contest
    from domain.models.payment import PaymentConfirmation
    from domain.models.tier_config import TierConfig
    from services.result import Result


class IWalletService(ABC):
    """Wallet ledger primitives. These raise typed errors instead of returning Result."""

    @abstractmethod
    def get_balance(self, user_id: int) -> Decimal: ...

    @abstractmethod
    def debit(self, user_id: int, amount: Decimal) -> Decimal:
        """Optimistic debit; raises InsufficientFundsError or ConcurrencyConflictError."""
        ...

    @abstractmethod
    def debit_with_retry(self, user_id: int, amount: Decimal) -> Decimal: ...

    @abstractmethod
    def credit(self, user_id: int, amount: Decimal) -> Decimal: ...


class ITierConfigService(ABC):
    @abstractmethod
    def get_config(self) -> "TierConfig":
        """Current tier percentages, read fresh from storage."""
        ...

    @abstractmethod
    def update_config(
        self, caller: "Caller", house_share: Any, six_hits_share: Any, five_hits_share: Any
    ) -> "Result[TierConfig]": ...


class IContestService(ABC):
    @abstractmethod
    def get_contest(self, contest_id: int) -> "Contest | None": ...

    @abstractmethod
    def get_open_contest(self) -> "Contest | None": ...

    @abstractmethod
    def open_contest(
        self,
        caller: "Caller",
        month_year: str,
        closing_at: Any,
        bet_price: Any = None,
        draw_date: str | None = None,
    ) -> "Result[Contest]": ...


class IProfileService(ABC):
    @abstractmethod
    def get_pix_key(self, user_id: int) -> str | None: ...

    @abstractmethod
    def set_pix_key(self, caller: "Caller", pix_key: str) -> "Result[str]": ...


class IBetService(ABC):
    @abstractmethod
    def place_bet(self, caller: "Caller", contest_id: int, chosen_numbers: Any) -> "Result":
        """Validate a 6-number pick, debit the bet price and record the bet."""
        ...


class ISettlementService(ABC):
    @abstractmethod
    def close_contest(self, caller: "Caller", contest_id: int, winning_numbers: Any) -> "Result":
        """Close an open contest with the draw and pay winners (at most once)."""
        ...

    @abstractmethod
    def reconcile_payouts(self, caller: "Caller", contest_id: int) -> "Result":
        """Resume an interrupted or partially paid settlement."""
        ...


class IWithdrawalService(ABC):
    @abstractmethod
    def request_withdrawal(self, caller: "Caller", amount: Any) -> "Result": ...

    @abstractmethod
    def approve_withdrawal(self, caller: "Caller", transaction_id: int) -> "Result": ...

    @abstractmethod
    def reject_withdrawal(
        self, caller: "Caller", transaction_id: int, reason: str | None = None
    ) -> "Result": ...


class IDepositService(ABC):
    @abstractmethod
    def create_deposit_request(
        self, caller: "Caller", amount: Any, description: str | None = None
    ) -> "Result": ...

    @abstractmethod
    def on_payment_confirmed(self, confirmation: "PaymentConfirmation") -> "Result":
        """Idempotently credit an approved payment."""
        ...
