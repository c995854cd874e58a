"""
Abstract repository interfaces for data access.

These interfaces define the contracts implemented by concrete repositories.
Amounts cross this boundary as integer cents.
"""

from abc import ABC, abstractmethod


class IWalletRepository(ABC):
    @abstractmethod
    def get_wallet(self, user_id: int) -> tuple[int, int] | None: ...

    @abstractmethod
    def get_balance_cents(self, user_id: int) -> int: ...

    @abstractmethod
    def compare_and_set_balance(
        self, user_id: int, expected_version: int, new_balance_cents: int
    ) -> bool: ...

    @abstractmethod
    def add_balance(self, user_id: int, delta_cents: int) -> int: ...


class IContestRepository(ABC):
    @abstractmethod
    def create_if_none_open(
        self,
        month_year: str,
        bet_price_cents: int,
        closing_at: int,
        seed_cents: int,
        draw_date: str | None = None,
    ) -> int | None: ...

    @abstractmethod
    def get_by_id(self, contest_id: int): ...

    @abstractmethod
    def get_open(self): ...

    @abstractmethod
    def get_last_closed(self): ...

    @abstractmethod
    def list_recent(self, limit: int = 10) -> list: ...

    @abstractmethod
    def close_if_open(self, contest_id: int, winning_numbers: list[int], closed_at: int) -> bool: ...

    @abstractmethod
    def record_settlement(
        self,
        contest_id: int,
        winners6: int,
        winners5: int,
        prize_value_cents: int,
        carryover_cents: int,
        payout_status: str,
    ) -> None: ...

    @abstractmethod
    def set_payout_status(self, contest_id: int, payout_status: str) -> None: ...


class IBetRepository(ABC):
    @abstractmethod
    def place_bet_atomic(
        self,
        contest_id: int,
        user_id: int,
        chosen_numbers: list[int],
        amount_cents: int,
        description: str | None = None,
    ) -> tuple[int, int] | None: ...

    @abstractmethod
    def get_by_id(self, bet_id: int): ...

    @abstractmethod
    def get_user_bet(self, contest_id: int, user_id: int): ...

    @abstractmethod
    def get_for_contest(self, contest_id: int) -> list: ...

    @abstractmethod
    def get_user_bets(self, user_id: int, limit: int = 10) -> list: ...

    @abstractmethod
    def record_hits(self, hits_by_bet_id: dict[int, int]) -> None: ...

    @abstractmethod
    def assign_prizes(self, prize_cents_by_bet_id: dict[int, int]) -> None: ...

    @abstractmethod
    def claim_prize(self, bet_id: int) -> bool: ...

    @abstractmethod
    def release_prize_claim(self, bet_id: int) -> bool: ...

    @abstractmethod
    def get_unpaid_winners(self, contest_id: int) -> list: ...

    @abstractmethod
    def count_with_min_hits(self, contest_id: int, min_hits: int) -> int: ...


class ITransactionRepository(ABC):
    @abstractmethod
    def create(
        self,
        user_id: int,
        type: str,
        amount_cents: int,
        status: str,
        description: str | None = None,
        payment_id: str | None = None,
        contest_id: int | None = None,
        bet_id: int | None = None,
    ) -> int: ...

    @abstractmethod
    def get_by_id(self, transaction_id: int): ...

    @abstractmethod
    def get_by_payment_id(self, payment_id: str): ...

    @abstractmethod
    def has_pending_withdrawal(self, user_id: int) -> bool: ...

    @abstractmethod
    def get_pending_withdrawals(self, limit: int = 25) -> list: ...

    @abstractmethod
    def transition_status(
        self,
        transaction_id: int,
        expected_status: str,
        new_status: str,
        description: str | None = None,
    ) -> bool: ...

    @abstractmethod
    def complete_deposit(
        self, payment_id: str, user_id: int, amount_cents: int, description: str
    ) -> bool: ...

    @abstractmethod
    def get_user_transactions(self, user_id: int, limit: int = 10) -> list: ...


class ITierConfigRepository(ABC):
    @abstractmethod
    def get(self) -> dict | None: ...

    @abstractmethod
    def save(
        self, house_share: str, six_hits_share: str, five_hits_share: str, updated_by: int | None
    ) -> None: ...


class IProfileRepository(ABC):
    @abstractmethod
    def get_pix_key(self, user_id: int) -> str | None: ...

    @abstractmethod
    def set_pix_key(self, user_id: int, pix_key: str, username: str | None = None) -> None: ...


class INotificationRepository(ABC):
    @abstractmethod
    def create(
        self,
        type: str,
        title: str,
        message: str,
        user_id: int | None = None,
        target_role: str | None = None,
        data: dict | None = None,
    ) -> int: ...

    @abstractmethod
    def get_for_user(self, user_id: int, unread_only: bool = False, limit: int = 20) -> list[dict]: ...

    @abstractmethod
    def mark_read(self, notification_id: int, user_id: int) -> bool: ...
