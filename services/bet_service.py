"""
Bet placement.

A bet debits the wallet, then records the bet, its ledger entry and the pool
increment in one transaction guarded on the contest still being open. If that
write does not happen, the debit is credited back.
"""

import logging
import sqlite3
import time
from dataclasses import dataclass
from decimal import Decimal

from config import PICK_SIZE
from domain.models.bet import Bet
from domain.models.caller import Caller
from domain.services.number_validation import validate_numbers
from repositories.interfaces import IBetRepository, IContestRepository
from services import error_codes
from services.errors import (
    BolaoError,
    NotFoundError,
    PersistenceError,
    StateConflictError,
    ValidationError,
)
from services.interfaces import IBetService
from services.permissions import require_caller
from services.result import Result
from services.wallet_service import WalletService
from utils.money import to_cents

logger = logging.getLogger("bolao.services.bet")


@dataclass
class BetReceipt:
    bet_id: int
    contest_id: int
    amount: Decimal
    chosen_numbers: list[int]
    new_balance: Decimal


class BetService(IBetService):
    def __init__(
        self,
        contest_repo: IContestRepository,
        bet_repo: IBetRepository,
        wallet_service: WalletService,
        clock=time.time,
    ):
        self.contest_repo = contest_repo
        self.bet_repo = bet_repo
        self.wallet_service = wallet_service
        self.clock = clock

    def place_bet(self, caller: Caller, contest_id: int, chosen_numbers) -> Result[BetReceipt]:
        """
        Stake the contest's bet price on a 6-number pick.

        Returns:
            Result.ok(BetReceipt) on success; on failure the wallet is unchanged
        """
        try:
            return Result.ok(self._place_bet(caller, contest_id, chosen_numbers))
        except BolaoError as exc:
            return Result.from_error(exc)

    def _place_bet(self, caller: Caller, contest_id: int, chosen_numbers) -> BetReceipt:
        user_id = require_caller(caller)
        try:
            numbers = validate_numbers(chosen_numbers, PICK_SIZE)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        contest = self.contest_repo.get_by_id(contest_id)
        if contest is None:
            raise NotFoundError(f"Contest {contest_id} not found.", code=error_codes.CONTEST_NOT_FOUND)
        if not contest.accepts_bets_at(self.clock()):
            raise StateConflictError(
                "This contest is closed for bets.", code=error_codes.CONTEST_CLOSED
            )
        if self.bet_repo.get_user_bet(contest_id, user_id) is not None:
            raise StateConflictError(
                "You already have a bet in this contest.", code=error_codes.ALREADY_BET
            )

        price = contest.bet_price
        new_balance = self.wallet_service.debit_with_retry(user_id, price)

        try:
            placed = self.bet_repo.place_bet_atomic(
                contest_id,
                user_id,
                numbers,
                to_cents(price),
                description=f"Bet on contest {contest.month_year}",
            )
        except sqlite3.IntegrityError as exc:
            self._refund(user_id, price)
            raise StateConflictError(
                "You already have a bet in this contest.", code=error_codes.ALREADY_BET
            ) from exc
        except sqlite3.Error as exc:
            logger.error(f"Bet write failed for user {user_id} in contest {contest_id}: {exc}")
            self._refund(user_id, price)
            raise PersistenceError("Could not record your bet; you were not charged.") from exc

        if placed is None:
            self._refund(user_id, price)
            raise StateConflictError("This contest is closed for bets.", code=error_codes.CONTEST_CLOSED)

        bet_id, _ = placed
        logger.info(f"User {user_id} bet {price} on contest {contest_id}: {numbers} (bet {bet_id})")
        return BetReceipt(
            bet_id=bet_id,
            contest_id=contest_id,
            amount=price,
            chosen_numbers=numbers,
            new_balance=new_balance,
        )

    def _refund(self, user_id: int, amount: Decimal) -> None:
        """Credit back a debit whose bet write was rolled back."""
        try:
            self.wallet_service.credit(user_id, amount)
        except Exception as exc:
            logger.critical(
                f"Refund of {amount} to user {user_id} failed after a failed bet; manual fix needed",
                exc_info=True,
            )
            raise PersistenceError(
                "Your bet failed and the refund could not be completed; an admin has been alerted."
            ) from exc

    def get_user_bet(self, contest_id: int, user_id: int) -> Bet | None:
        return self.bet_repo.get_user_bet(contest_id, user_id)

    def get_user_bets(self, user_id: int, limit: int = 10) -> list[Bet]:
        return self.bet_repo.get_user_bets(user_id, limit)
