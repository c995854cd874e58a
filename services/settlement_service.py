"""
Contest settlement: close, score, compute tiered prizes, pay winners.

Closing is a single conditional update, so a contest is settled at most once.
Everything after the close is resumable:

1. hits for every bet are stored in one write
2. prize amounts are stored on the winning bets and the contest summary is
   recorded (payout_status "paying")
3. each winner is paid independently: claim the bet (prize_paid 0 -> 1),
   credit the wallet, record the prize transaction. A failed credit releases
   the claim; a failed record reverses the credit and releases the claim.

Any winner left unpaid leaves the contest "partial" and shows up in
SettlementResult.failed_payouts. reconcile_payouts() picks the contest up
again, re-scoring it if step 1 or 2 never finished.
"""

import logging
import sqlite3
import time
from dataclasses import dataclass, field
from decimal import Decimal

from config import DRAW_SIZE
from domain.models.bet import Bet
from domain.models.caller import Caller
from domain.models.contest import (
    PAYOUT_PAID,
    PAYOUT_PARTIAL,
    PAYOUT_PAYING,
    PAYOUT_SCORING,
    STATUS_OPEN,
    Contest,
)
from domain.models.tier_config import TierConfig
from domain.models.transaction import STATUS_COMPLETED, TYPE_PRIZE
from domain.services.number_validation import count_hits, validate_numbers
from domain.services.prize_calculator import PrizeCalculator
from repositories.interfaces import IBetRepository, IContestRepository, ITransactionRepository
from services import error_codes
from services.errors import (
    BolaoError,
    NotFoundError,
    PersistenceError,
    StateConflictError,
    ValidationError,
)
from services.interfaces import ISettlementService
from services.notification_service import PRIZE_PAID, NotificationService
from services.permissions import require_admin
from services.result import Result
from services.tier_config_service import TierConfigService
from services.wallet_service import WalletService
from utils.money import ZERO, format_brl, to_cents

logger = logging.getLogger("bolao.services.settlement")


@dataclass
class FailedPayout:
    bet_id: int
    user_id: int
    amount: Decimal
    reason: str


@dataclass
class SettlementResult:
    contest_id: int
    winners6_count: int
    winners5_count: int
    had_winners: bool
    prize_value: Decimal
    carryover_amount: Decimal
    prize6: Decimal = ZERO
    prize5: Decimal = ZERO
    pool6: Decimal | None = None
    pool5: Decimal | None = None
    total_paid: Decimal = ZERO
    payout_status: str = PAYOUT_PAID
    failed_payouts: list[FailedPayout] = field(default_factory=list)

    @property
    def fully_paid(self) -> bool:
        return not self.failed_payouts


class SettlementService(ISettlementService):
    def __init__(
        self,
        contest_repo: IContestRepository,
        bet_repo: IBetRepository,
        transaction_repo: ITransactionRepository,
        wallet_service: WalletService,
        tier_config_service: TierConfigService,
        notification_service: NotificationService | None = None,
        prize_calculator: PrizeCalculator | None = None,
        clock=time.time,
    ):
        self.contest_repo = contest_repo
        self.bet_repo = bet_repo
        self.transaction_repo = transaction_repo
        self.wallet_service = wallet_service
        self.tier_config_service = tier_config_service
        self.notification_service = notification_service
        self.prize_calculator = prize_calculator or PrizeCalculator()
        self.clock = clock

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def close_contest(self, caller: Caller, contest_id: int, winning_numbers) -> Result[SettlementResult]:
        """
        Close an open contest with the 20 drawn numbers and pay the winners.

        Returns:
            Result.ok(SettlementResult), possibly with failed_payouts to
            reconcile; Result.fail for validation, permission and state errors
            (nothing is written in those cases)
        """
        try:
            admin_id = require_admin(caller)
            try:
                winning = validate_numbers(winning_numbers, DRAW_SIZE)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

            contest = self._get_contest(contest_id)
            if contest.status != STATUS_OPEN:
                raise StateConflictError(
                    f"Contest {contest_id} is already closed.", code=error_codes.ALREADY_SETTLED
                )

            tiers = self._load_tiers()

            if not self.contest_repo.close_if_open(contest_id, winning, int(self.clock())):
                raise StateConflictError(
                    f"Contest {contest_id} is already closed.", code=error_codes.ALREADY_SETTLED
                )
            logger.info(f"Contest {contest_id} closed by admin {admin_id} with draw {winning}")

            return Result.ok(self._settle(contest_id, winning, tiers))
        except BolaoError as exc:
            return Result.from_error(exc)

    def reconcile_payouts(self, caller: Caller, contest_id: int) -> Result[SettlementResult]:
        """
        Resume settlement of a closed contest.

        Re-scores the contest if scoring never finished, then pays every
        winning bet that is still unpaid. Safe to run repeatedly.
        """
        try:
            admin_id = require_admin(caller)
            contest = self._get_contest(contest_id)
            if contest.status == STATUS_OPEN:
                raise StateConflictError(f"Contest {contest_id} is still open.")

            logger.info(
                f"Reconciling payouts for contest {contest_id} "
                f"(payout_status={contest.payout_status}) by admin {admin_id}"
            )
            if contest.payout_status == PAYOUT_SCORING:
                return Result.ok(self._settle(contest_id, contest.winning_numbers or [], self._load_tiers()))
            return Result.ok(self._resume_payouts(contest))
        except BolaoError as exc:
            return Result.from_error(exc)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _get_contest(self, contest_id: int) -> Contest:
        contest = self.contest_repo.get_by_id(contest_id)
        if contest is None:
            raise NotFoundError(f"Contest {contest_id} not found.", code=error_codes.CONTEST_NOT_FOUND)
        return contest

    def _load_tiers(self) -> TierConfig:
        tiers = self.tier_config_service.get_config()
        try:
            tiers.validate()
        except ValueError as exc:
            raise ValidationError(f"Tier configuration is invalid: {exc}") from exc
        return tiers

    def _settle(self, contest_id: int, winning: list[int], tiers: TierConfig) -> SettlementResult:
        try:
            contest = self._get_contest(contest_id)
            bets = self.bet_repo.get_for_contest(contest_id)

            hits_by_bet = {bet.id: count_hits(bet.chosen_numbers, winning) for bet in bets}
            self.bet_repo.record_hits(hits_by_bet)

            winners6 = [bet for bet in bets if hits_by_bet[bet.id] == 6]
            winners5 = [bet for bet in bets if hits_by_bet[bet.id] == 5]
            plan = self.prize_calculator.calculate(
                contest.total_collected, len(winners6), len(winners5), tiers
            )

            prizes: dict[int, Decimal] = {}
            for bet in winners6 + winners5:
                net = plan.net_for_hits(hits_by_bet[bet.id])
                if net is not None:
                    prizes[bet.id] = net
            self.bet_repo.assign_prizes({bet_id: to_cents(net) for bet_id, net in prizes.items()})
            self.contest_repo.record_settlement(
                contest_id,
                winners6=len(winners6),
                winners5=len(winners5),
                prize_value_cents=to_cents(plan.prize_value),
                carryover_cents=to_cents(plan.carryover_amount),
                payout_status=PAYOUT_PAYING if prizes else PAYOUT_PAID,
            )
        except sqlite3.Error as exc:
            logger.error(
                f"Scoring of contest {contest_id} failed after close: {exc}. "
                "Contest left in 'scoring'; run reconciliation."
            )
            raise PersistenceError(
                f"Contest {contest_id} was closed but scoring failed; run payout reconciliation."
            ) from exc

        logger.info(
            f"Contest {contest_id} scored: {len(bets)} bets, winners6={len(winners6)} "
            f"winners5={len(winners5)} prize_value={plan.prize_value} "
            f"prize6={plan.six.per_winner_net} prize5={plan.five.per_winner_net} "
            f"carryover={plan.carryover_amount}"
        )

        winners = [bet for bet in winners6 + winners5 if bet.id in prizes]
        for bet in winners:
            bet.hits = hits_by_bet[bet.id]
            bet.prize_amount = prizes[bet.id]
        total_paid, failures = self._pay_winners(contest, winners)
        payout_status = self._finish(contest_id, failures) if prizes else PAYOUT_PAID

        return SettlementResult(
            contest_id=contest_id,
            winners6_count=len(winners6),
            winners5_count=len(winners5),
            had_winners=plan.had_winners,
            prize_value=plan.prize_value,
            carryover_amount=plan.carryover_amount,
            prize6=plan.six.per_winner_net,
            prize5=plan.five.per_winner_net,
            pool6=plan.six.pool,
            pool5=plan.five.pool,
            total_paid=total_paid,
            payout_status=payout_status,
            failed_payouts=failures,
        )

    def _resume_payouts(self, contest: Contest) -> SettlementResult:
        try:
            unpaid = self.bet_repo.get_unpaid_winners(contest.id)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not load unpaid winners for contest {contest.id}.") from exc

        total_paid, failures = self._pay_winners(contest, unpaid)
        if unpaid or contest.payout_status in (PAYOUT_PAYING, PAYOUT_PARTIAL):
            payout_status = self._finish(contest.id, failures)
        else:
            payout_status = contest.payout_status

        prize6, prize5 = self._tier_prizes(contest.id)
        winners6 = contest.winners6 or 0
        winners5 = contest.winners5 or 0
        return SettlementResult(
            contest_id=contest.id,
            winners6_count=winners6,
            winners5_count=winners5,
            had_winners=winners6 + winners5 > 0,
            prize_value=contest.prize_value if contest.prize_value is not None else contest.total_collected,
            carryover_amount=contest.carryover_amount if contest.carryover_amount is not None else ZERO,
            prize6=prize6,
            prize5=prize5,
            total_paid=total_paid,
            payout_status=payout_status,
            failed_payouts=failures,
        )

    def _tier_prizes(self, contest_id: int) -> tuple[Decimal, Decimal]:
        prize6 = prize5 = ZERO
        for bet in self.bet_repo.get_for_contest(contest_id):
            if bet.prize_amount is None:
                continue
            if bet.hits == 6:
                prize6 = bet.prize_amount
            elif bet.hits == 5:
                prize5 = bet.prize_amount
        return prize6, prize5

    def _finish(self, contest_id: int, failures: list[FailedPayout]) -> str:
        status = PAYOUT_PARTIAL if failures else PAYOUT_PAID
        try:
            self.contest_repo.set_payout_status(contest_id, status)
        except sqlite3.Error:
            # Payouts themselves are recorded per bet; the status is only a marker
            logger.exception(f"Could not set payout_status={status} on contest {contest_id}")
        if failures:
            logger.warning(
                f"Contest {contest_id} partially paid: {len(failures)} payout(s) pending reconciliation "
                f"(bets {[f.bet_id for f in failures]})"
            )
        return status

    # ------------------------------------------------------------------
    # Per-winner payout saga
    # ------------------------------------------------------------------

    def _pay_winners(self, contest: Contest, winners: list[Bet]) -> tuple[Decimal, list[FailedPayout]]:
        total_paid = ZERO
        failures: list[FailedPayout] = []
        for bet in winners:
            paid, failure = self._pay_winner(contest, bet)
            total_paid += paid
            if failure is not None:
                failures.append(failure)
        return total_paid, failures

    def _pay_winner(self, contest: Contest, bet: Bet) -> tuple[Decimal, FailedPayout | None]:
        """Returns (amount paid by this call, failure if any)."""
        amount = bet.prize_amount
        try:
            claimed = self.bet_repo.claim_prize(bet.id)
        except sqlite3.Error as exc:
            logger.error(f"Could not claim prize for bet {bet.id} (contest {contest.id}): {exc}")
            return ZERO, FailedPayout(bet.id, bet.user_id, amount, "claim failed")
        if not claimed:
            return ZERO, None

        try:
            self.wallet_service.credit(bet.user_id, amount)
        except Exception as exc:
            logger.error(
                f"Prize credit of {amount} failed for user {bet.user_id}, bet {bet.id}, "
                f"contest {contest.id}: {exc}"
            )
            self._release_claim(contest, bet)
            return ZERO, FailedPayout(bet.id, bet.user_id, amount, "credit failed")

        try:
            self.transaction_repo.create(
                user_id=bet.user_id,
                type=TYPE_PRIZE,
                amount_cents=to_cents(amount),
                status=STATUS_COMPLETED,
                description=f"Prize: {bet.hits} hits in contest {contest.month_year}",
                contest_id=contest.id,
                bet_id=bet.id,
            )
        except sqlite3.Error as exc:
            logger.error(
                f"Prize transaction insert failed for bet {bet.id} (contest {contest.id}): {exc}; "
                "reversing credit"
            )
            try:
                self.wallet_service.debit_with_retry(bet.user_id, amount)
            except Exception:
                # Money stays with the winner and the bet stays claimed so it
                # is never paid twice; only the ledger entry is missing.
                logger.critical(
                    f"Could not reverse prize credit of {amount} for user {bet.user_id}, bet {bet.id}, "
                    f"contest {contest.id}; prize paid without a transaction record",
                    exc_info=True,
                )
                return amount, FailedPayout(bet.id, bet.user_id, amount, "paid without transaction record")
            self._release_claim(contest, bet)
            return ZERO, FailedPayout(bet.id, bet.user_id, amount, "transaction record failed")

        logger.info(f"Paid prize {amount} to user {bet.user_id} for bet {bet.id} (contest {contest.id})")
        if self.notification_service:
            self.notification_service.notify_user(
                bet.user_id,
                PRIZE_PAID,
                "Prize paid",
                f"You hit {bet.hits} numbers in contest {contest.month_year} and won {format_brl(amount)}.",
                data={"contest_id": contest.id, "bet_id": bet.id, "amount": str(amount)},
            )
        return amount, None

    def _release_claim(self, contest: Contest, bet: Bet) -> None:
        try:
            self.bet_repo.release_prize_claim(bet.id)
        except sqlite3.Error:
            logger.critical(
                f"Could not release prize claim on bet {bet.id} (contest {contest.id}); "
                "winner is marked paid but was not credited",
                exc_info=True,
            )
