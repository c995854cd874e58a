"""
Tests for bet placement and its refund path.
"""

import sqlite3
from decimal import Decimal
from unittest.mock import patch

import pytest

from domain.models.transaction import TYPE_BET
from services import error_codes
from tests.conftest import CLOSING_AT, USER_ID

PICK = [3, 14, 15, 92, 65, 35]


@pytest.fixture
def funded_user(wallet_service, user):
    wallet_service.credit(user.user_id, Decimal("25.00"))
    return user


def test_place_bet_debits_and_records(
    bet_service, wallet_service, transaction_repository, contest_repository, funded_user, open_contest
):
    result = bet_service.place_bet(funded_user, open_contest.id, PICK)

    assert result.success, result.error
    receipt = result.value
    assert receipt.amount == Decimal("10.00")
    assert receipt.chosen_numbers == sorted(PICK)
    assert receipt.new_balance == Decimal("15.00")
    assert wallet_service.get_balance(USER_ID) == Decimal("15.00")

    bet = bet_service.get_user_bet(open_contest.id, USER_ID)
    assert bet.id == receipt.bet_id
    assert bet.chosen_numbers == sorted(PICK)
    assert bet.hits is None
    assert bet.prize_paid is False

    history = transaction_repository.get_user_transactions(USER_ID)
    bet_entries = [tx for tx in history if tx.type == TYPE_BET]
    assert len(bet_entries) == 1
    assert bet_entries[0].amount == Decimal("-10.00")
    assert bet_entries[0].bet_id == receipt.bet_id

    contest = contest_repository.get_by_id(open_contest.id)
    assert contest.total_collected == Decimal("10.00")
    assert contest.num_bets == 1


def test_second_bet_in_same_contest_rejected(bet_service, wallet_service, funded_user, open_contest):
    assert bet_service.place_bet(funded_user, open_contest.id, PICK).success

    result = bet_service.place_bet(funded_user, open_contest.id, [1, 2, 3, 4, 5, 6])

    assert not result.success
    assert result.error_code == error_codes.ALREADY_BET
    assert wallet_service.get_balance(USER_ID) == Decimal("15.00")


def test_insufficient_balance_rejected(bet_service, wallet_service, user, open_contest, bet_repository):
    wallet_service.credit(user.user_id, Decimal("9.99"))

    result = bet_service.place_bet(user, open_contest.id, PICK)

    assert not result.success
    assert result.error_code == error_codes.INSUFFICIENT_FUNDS
    assert wallet_service.get_balance(USER_ID) == Decimal("9.99")
    assert bet_repository.get_for_contest(open_contest.id) == []


@pytest.mark.parametrize(
    "numbers",
    [
        [1, 2, 3, 4, 5],
        [1, 2, 3, 4, 5, 5],
        [1, 2, 3, 4, 5, 100],
        [1, 2, 3, 4, 5, -1],
    ],
)
def test_invalid_pick_leaves_balance_unchanged(bet_service, wallet_service, funded_user, open_contest, numbers):
    result = bet_service.place_bet(funded_user, open_contest.id, numbers)

    assert not result.success
    assert result.error_code == error_codes.VALIDATION_ERROR
    assert wallet_service.get_balance(USER_ID) == Decimal("25.00")


def test_unknown_contest(bet_service, funded_user):
    result = bet_service.place_bet(funded_user, 999, PICK)

    assert not result.success
    assert result.error_code == error_codes.CONTEST_NOT_FOUND


def test_bet_after_closing_time_rejected(bet_service, wallet_service, funded_user, open_contest, clock):
    clock.now = CLOSING_AT

    result = bet_service.place_bet(funded_user, open_contest.id, PICK)

    assert not result.success
    assert result.error_code == error_codes.CONTEST_CLOSED
    assert wallet_service.get_balance(USER_ID) == Decimal("25.00")


def test_bet_on_closed_contest_rejected(
    bet_service, wallet_service, contest_repository, funded_user, open_contest, clock
):
    contest_repository.close_if_open(open_contest.id, list(range(20)), int(clock()))

    result = bet_service.place_bet(funded_user, open_contest.id, PICK)

    assert not result.success
    assert result.error_code == error_codes.CONTEST_CLOSED
    assert wallet_service.get_balance(USER_ID) == Decimal("25.00")


def test_anonymous_caller_rejected(bet_service, open_contest):
    from domain.models.caller import Caller

    result = bet_service.place_bet(Caller(user_id=None), open_contest.id, PICK)

    assert not result.success
    assert result.error_code == error_codes.AUTH_ERROR


class TestCompensation:
    def test_contest_closed_between_debit_and_write_refunds(
        self,
        bet_service,
        wallet_service,
        bet_repository,
        transaction_repository,
        contest_repository,
        funded_user,
        open_contest,
        clock,
    ):
        """A close landing right after the debit must not swallow the stake."""
        real_debit = wallet_service.debit_with_retry

        def debit_then_close(user_id, amount):
            balance = real_debit(user_id, amount)
            assert contest_repository.close_if_open(open_contest.id, list(range(20)), int(clock()))
            return balance

        with patch.object(wallet_service, "debit_with_retry", side_effect=debit_then_close):
            result = bet_service.place_bet(funded_user, open_contest.id, PICK)

        assert not result.success
        assert result.error_code == error_codes.CONTEST_CLOSED
        assert wallet_service.get_balance(USER_ID) == Decimal("25.00")
        assert bet_repository.get_for_contest(open_contest.id) == []
        assert [tx for tx in transaction_repository.get_user_transactions(USER_ID) if tx.type == TYPE_BET] == []
        contest = contest_repository.get_by_id(open_contest.id)
        assert contest.total_collected == Decimal("0.00")
        assert contest.num_bets == 0

    def test_write_failure_refunds(
        self, bet_service, wallet_service, bet_repository, contest_repository, funded_user, open_contest
    ):
        with patch.object(
            bet_repository, "place_bet_atomic", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            result = bet_service.place_bet(funded_user, open_contest.id, PICK)

        assert not result.success
        assert result.error_code == error_codes.PERSISTENCE_ERROR
        assert wallet_service.get_balance(USER_ID) == Decimal("25.00")
        assert bet_repository.get_for_contest(open_contest.id) == []
        assert contest_repository.get_by_id(open_contest.id).num_bets == 0

        # The user can still bet once the problem is gone
        assert bet_service.place_bet(funded_user, open_contest.id, PICK).success

    def test_unique_violation_maps_to_already_bet(
        self, bet_service, wallet_service, bet_repository, contest_repository, funded_user, open_contest
    ):
        """Two concurrent bets both pass the pre-check; the index stops the second."""
        with patch.object(bet_repository, "get_user_bet", return_value=None):
            assert bet_service.place_bet(funded_user, open_contest.id, PICK).success
            result = bet_service.place_bet(funded_user, open_contest.id, [1, 2, 3, 4, 5, 6])

        assert not result.success
        assert result.error_code == error_codes.ALREADY_BET
        assert wallet_service.get_balance(USER_ID) == Decimal("15.00")
        contest = contest_repository.get_by_id(open_contest.id)
        assert contest.total_collected == Decimal("10.00")
        assert contest.num_bets == 1

    def test_failed_refund_is_reported(self, bet_service, wallet_service, bet_repository, funded_user, open_contest):
        with patch.object(bet_repository, "place_bet_atomic", return_value=None), patch.object(
            wallet_service, "credit", side_effect=sqlite3.OperationalError("locked")
        ):
            result = bet_service.place_bet(funded_user, open_contest.id, PICK)

        assert not result.success
        assert result.error_code == error_codes.PERSISTENCE_ERROR


class TestPlaceBetAtomic:
    def test_records_bet_ledger_entry_and_pool_together(
        self, bet_repository, transaction_repository, contest_repository, open_contest
    ):
        bet_id, transaction_id = bet_repository.place_bet_atomic(
            open_contest.id, USER_ID, PICK, 1000, description="Bet on contest 11/2026"
        )

        assert bet_repository.get_by_id(bet_id).chosen_numbers == sorted(PICK)
        entry = transaction_repository.get_by_id(transaction_id)
        assert entry.type == TYPE_BET
        assert entry.amount == Decimal("-10.00")
        assert entry.bet_id == bet_id
        contest = contest_repository.get_by_id(open_contest.id)
        assert contest.total_collected == Decimal("10.00")
        assert contest.num_bets == 1

    def test_closed_contest_writes_nothing(self, bet_repository, contest_repository, open_contest, clock):
        contest_repository.close_if_open(open_contest.id, list(range(20)), int(clock()))

        assert bet_repository.place_bet_atomic(open_contest.id, USER_ID, PICK, 1000) is None
        assert bet_repository.get_for_contest(open_contest.id) == []
        assert contest_repository.get_by_id(open_contest.id).total_collected == Decimal("0.00")

    def test_duplicate_rolls_back_pool_increment(
        self, bet_repository, transaction_repository, contest_repository, open_contest
    ):
        bet_repository.place_bet_atomic(open_contest.id, USER_ID, PICK, 1000)

        with pytest.raises(sqlite3.IntegrityError):
            bet_repository.place_bet_atomic(open_contest.id, USER_ID, [1, 2, 3, 4, 5, 6], 1000)

        contest = contest_repository.get_by_id(open_contest.id)
        assert contest.total_collected == Decimal("10.00")
        assert contest.num_bets == 1
        assert len(transaction_repository.get_user_transactions(USER_ID)) == 1


def test_get_user_bets_newest_first(bet_service, funded_user, open_contest, contest_service, contest_repository, admin, clock):
    assert bet_service.place_bet(funded_user, open_contest.id, PICK).success
    contest_repository.close_if_open(open_contest.id, list(range(20)), int(clock()))
    second = contest_service.open_contest(admin, "12/2026", CLOSING_AT).value
    assert bet_service.place_bet(funded_user, second.id, [1, 2, 3, 4, 5, 6]).success

    bets = bet_service.get_user_bets(USER_ID)

    assert [b.contest_id for b in bets] == [second.id, open_contest.id]
