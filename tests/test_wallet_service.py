"""
Tests for WalletService debit/credit primitives.
"""

import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from services.errors import ConcurrencyConflictError, InsufficientFundsError, ValidationError
from services.wallet_service import WalletService
from tests.conftest import OTHER_USER_ID, USER_ID


class TestCredit:
    def test_credit_creates_wallet(self, wallet_service):
        assert wallet_service.get_balance(USER_ID) == Decimal("0.00")

        new_balance = wallet_service.credit(USER_ID, Decimal("25.50"))

        assert new_balance == Decimal("25.50")
        assert wallet_service.get_balance(USER_ID) == Decimal("25.50")

    def test_credit_accumulates(self, wallet_service):
        wallet_service.credit(USER_ID, Decimal("10"))
        wallet_service.credit(USER_ID, Decimal("0.05"))

        assert wallet_service.get_balance(USER_ID) == Decimal("10.05")

    def test_credit_zero_is_allowed(self, wallet_service):
        assert wallet_service.credit(USER_ID, Decimal("0")) == Decimal("0.00")

    def test_negative_credit_rejected(self, wallet_service):
        with pytest.raises(ValidationError):
            wallet_service.credit(USER_ID, Decimal("-1"))

    def test_wallets_are_independent(self, wallet_service):
        wallet_service.credit(USER_ID, Decimal("5"))

        assert wallet_service.get_balance(OTHER_USER_ID) == Decimal("0.00")


class TestDebit:
    def test_debit_reduces_balance(self, wallet_service):
        wallet_service.credit(USER_ID, Decimal("30"))

        new_balance = wallet_service.debit(USER_ID, Decimal("12.25"))

        assert new_balance == Decimal("17.75")
        assert wallet_service.get_balance(USER_ID) == Decimal("17.75")

    def test_debit_entire_balance(self, wallet_service):
        wallet_service.credit(USER_ID, Decimal("10"))

        assert wallet_service.debit(USER_ID, Decimal("10")) == Decimal("0.00")

    def test_insufficient_funds_leaves_balance(self, wallet_service):
        wallet_service.credit(USER_ID, Decimal("5"))

        with pytest.raises(InsufficientFundsError) as exc_info:
            wallet_service.debit(USER_ID, Decimal("5.01"))

        assert exc_info.value.balance == Decimal("5.00")
        assert exc_info.value.required == Decimal("5.01")
        assert wallet_service.get_balance(USER_ID) == Decimal("5.00")

    def test_debit_without_wallet_is_insufficient(self, wallet_service):
        with pytest.raises(InsufficientFundsError):
            wallet_service.debit(USER_ID, Decimal("1"))

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-3")])
    def test_non_positive_debit_rejected(self, wallet_service, amount):
        wallet_service.credit(USER_ID, Decimal("10"))

        with pytest.raises(ValidationError):
            wallet_service.debit(USER_ID, amount)

    def test_stale_version_raises_conflict(self):
        repo = MagicMock()
        repo.get_wallet.return_value = (1000, 4)
        repo.compare_and_set_balance.return_value = False
        service = WalletService(repo, max_debit_attempts=3)

        with pytest.raises(ConcurrencyConflictError):
            service.debit(USER_ID, Decimal("1"))

        repo.compare_and_set_balance.assert_called_once_with(USER_ID, 4, 900)


class TestDebitWithRetry:
    def test_retries_until_write_lands(self):
        repo = MagicMock()
        repo.get_wallet.side_effect = [(1000, 1), (1000, 2)]
        repo.compare_and_set_balance.side_effect = [False, True]
        service = WalletService(repo, max_debit_attempts=3)

        assert service.debit_with_retry(USER_ID, Decimal("2.50")) == Decimal("7.50")
        assert repo.compare_and_set_balance.call_count == 2

    def test_gives_up_after_max_attempts(self):
        repo = MagicMock()
        repo.get_wallet.return_value = (1000, 1)
        repo.compare_and_set_balance.return_value = False
        service = WalletService(repo, max_debit_attempts=3)

        with pytest.raises(ConcurrencyConflictError):
            service.debit_with_retry(USER_ID, Decimal("1"))

        assert repo.compare_and_set_balance.call_count == 3

    def test_does_not_retry_insufficient_funds(self):
        repo = MagicMock()
        repo.get_wallet.return_value = (100, 1)
        service = WalletService(repo, max_debit_attempts=3)

        with pytest.raises(InsufficientFundsError):
            service.debit_with_retry(USER_ID, Decimal("2"))

        repo.compare_and_set_balance.assert_not_called()


def test_concurrent_debits_never_overdraw(wallet_repository):
    """Ten threads race to spend a balance that covers only four debits."""
    service = WalletService(wallet_repository, max_debit_attempts=50)
    service.credit(USER_ID, Decimal("40"))

    successes = []
    rejected = []
    barrier = threading.Barrier(10)

    def spend():
        barrier.wait()
        try:
            service.debit_with_retry(USER_ID, Decimal("10"))
            successes.append(1)
        except (InsufficientFundsError, ConcurrencyConflictError):
            rejected.append(1)

    threads = [threading.Thread(target=spend) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    balance = service.get_balance(USER_ID)
    assert balance >= Decimal("0")
    assert balance == Decimal("40") - Decimal("10") * len(successes)
    assert len(successes) <= 4
    assert len(successes) + len(rejected) == 10
