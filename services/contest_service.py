"""
Contest lifecycle: opening a new cycle and looking contests up.

Closing lives in SettlementService.
"""

import logging
import time
from datetime import datetime
from decimal import Decimal

from config import DEFAULT_BET_PRICE
from domain.models.caller import Caller
from domain.models.contest import Contest
from repositories.interfaces import IBetRepository, IContestRepository
from services import error_codes
from services.errors import BolaoError, StateConflictError, ValidationError
from services.interfaces import IContestService
from services.permissions import require_admin
from services.result import Result
from utils.money import ZERO, parse_money, to_cents

logger = logging.getLogger("bolao.services.contest")


class ContestService(IContestService):
    def __init__(
        self,
        contest_repo: IContestRepository,
        bet_repo: IBetRepository,
        default_bet_price: Decimal = DEFAULT_BET_PRICE,
        clock=time.time,
    ):
        self.contest_repo = contest_repo
        self.bet_repo = bet_repo
        self.default_bet_price = default_bet_price
        self.clock = clock

    def get_contest(self, contest_id: int) -> Contest | None:
        return self.contest_repo.get_by_id(contest_id)

    def get_open_contest(self) -> Contest | None:
        return self.contest_repo.get_open()

    def list_contests(self, limit: int = 10) -> list[Contest]:
        return self.contest_repo.list_recent(limit)

    def get_carryover(self) -> Decimal:
        """
        Amount rolled into the next contest: the whole pool of the last
        closed contest if nobody hit 5 or 6 numbers there, else zero.
        """
        last = self.contest_repo.get_last_closed()
        if last is None:
            return ZERO
        if last.carryover_amount is not None:
            return last.carryover_amount
        # Settlement summary missing (interrupted run); fall back to the hits
        if self.bet_repo.count_with_min_hits(last.id, 5) > 0:
            return ZERO
        return last.total_collected

    def open_contest(
        self,
        caller: Caller,
        month_year: str,
        closing_at: datetime | int | float,
        bet_price=None,
        draw_date: str | None = None,
    ) -> Result[Contest]:
        """
        Open a new contest seeded with the previous carryover.

        Fails with CONTEST_ALREADY_OPEN if another contest is still open.
        """
        try:
            admin_id = require_admin(caller)

            label = (month_year or "").strip()
            if not label:
                raise ValidationError("Contest label (month/year) is required.")

            closing_ts = int(closing_at.timestamp()) if isinstance(closing_at, datetime) else int(closing_at)
            if closing_ts <= self.clock():
                raise ValidationError("Closing date must be in the future.")

            try:
                price = parse_money(bet_price) if bet_price is not None else parse_money(self.default_bet_price)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            if price <= ZERO:
                raise ValidationError("Bet price must be positive.")

            seed = self.get_carryover()
            contest_id = self.contest_repo.create_if_none_open(
                month_year=label,
                bet_price_cents=to_cents(price),
                closing_at=closing_ts,
                seed_cents=to_cents(seed),
                draw_date=draw_date,
            )
            if contest_id is None:
                raise StateConflictError(
                    "There is already an open contest.", code=error_codes.CONTEST_ALREADY_OPEN
                )
        except BolaoError as exc:
            return Result.from_error(exc)

        logger.info(
            f"Contest {contest_id} ({label}) opened by admin {admin_id}: "
            f"price={price} closing_at={closing_ts} carryover={seed}"
        )
        return Result.ok(self.contest_repo.get_by_id(contest_id))
