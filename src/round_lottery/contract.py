from __future__ import annotations

import logging
from typing import Optional

from .draw import DrawOutcome, buy_ticket, plan_draw, time_remaining
from .environment import Environment
from .errors import DeployError, PayoutFailed, TransferError, UpgradeFailed
from .state import Round

log = logging.getLogger(__name__)


class LotteryContract:
    """
    Public surface of the lottery.

    Reads caller, time and attached value from the environment, runs the
    draw engine and installs the resulting round only after the whole call
    succeeded. Calls are expected to be serialized by the host.
    """

    def __init__(self, env: Environment, round_: Round) -> None:
        self.env = env
        self.round = round_

    @classmethod
    def create(
        cls,
        env: Environment,
        ticket_price: Optional[int] = None,
        close_time: Optional[int] = None,
    ) -> "LotteryContract":
        round_ = Round.create(
            organizer=env.current_caller(),
            now=env.current_time(),
            ticket_price=ticket_price,
            close_time=close_time,
        )
        log.info(
            "Round created by %s: ticket price %d, closes at %d",
            round_.organizer,
            round_.ticket_price,
            round_.close_time,
        )
        return cls(env, round_)

    @property
    def ticket_price(self) -> int:
        return self.round.ticket_price

    @property
    def close_time(self) -> int:
        return self.round.close_time

    def pool_total(self) -> int:
        return self.round.pool

    def time_remaining(self) -> int:
        return time_remaining(self.round, self.env.current_time())

    def buy_ticket(self) -> None:
        caller = self.env.current_caller()
        self.round = buy_ticket(self.round, caller, self.env.transferred_amount())
        log.info(
            "Ticket #%d sold to %s, pool now %d",
            len(self.round.participants),
            caller,
            self.round.pool,
        )

    def draw(self) -> DrawOutcome:
        outcome, next_round = plan_draw(self.round, self.env.current_time())
        try:
            self.env.transfer(outcome.winner, outcome.amount)
        except TransferError as e:
            raise PayoutFailed(outcome.winner, outcome.amount) from e

        self.round = next_round
        log.info(
            "Winner %s (index %d of %d) received %d; next round closes at %d",
            outcome.winner,
            outcome.index,
            outcome.participant_count,
            outcome.amount,
            next_round.close_time,
        )
        return outcome

    def set_code(self, code_hash: bytes) -> None:
        try:
            self.env.deploy_new_logic(code_hash)
        except DeployError as e:
            raise UpgradeFailed(code_hash) from e
        log.info("Switched code hash to 0x%s", code_hash.hex())
