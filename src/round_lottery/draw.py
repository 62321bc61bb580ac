from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidPayment, RoundNotClosed
from .state import Round

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawOutcome:
    winner: str
    index: int
    amount: int
    timestamp: int
    seed_counter: int  # value after the draw's own increment
    participant_count: int

    @property
    def organizer_fallback(self) -> bool:
        return self.index >= self.participant_count


def buy_ticket(round_: Round, caller: str, paid_amount: int) -> Round:
    if paid_amount != round_.ticket_price:
        raise InvalidPayment(paid_amount, round_.ticket_price)
    return round_.with_ticket(caller, paid_amount)


def time_remaining(round_: Round, current_time: int) -> int:
    if current_time > round_.close_time:
        return 0
    return round_.close_time - current_time


def pseudo_random(seed_counter: int, bound: int, current_time: int) -> int:
    """
    Index in [0, bound] inclusive derived from time and the seed counter.

    Anyone who knows the approximate draw time and the number of purchases can
    compute the result in advance. The top value (== bound) never names a
    participant and pays the organizer.
    """
    return (current_time + seed_counter) % (bound + 1)


def select_winner(round_: Round, index: int) -> str:
    if 0 <= index < len(round_.participants):
        return round_.participants[index]
    return round_.organizer


def predict_draw(round_: Round, at_time: int) -> DrawOutcome:
    """What a draw executed at `at_time` would pick. Nothing is mutated."""
    bumped = round_.with_seed_bumped()
    index = pseudo_random(bumped.seed_counter, len(bumped.participants), at_time)
    return DrawOutcome(
        winner=select_winner(bumped, index),
        index=index,
        amount=bumped.pool,
        timestamp=at_time,
        seed_counter=bumped.seed_counter,
        participant_count=len(bumped.participants),
    )


def plan_draw(round_: Round, current_time: int) -> Tuple[DrawOutcome, Round]:
    """
    Validate the time window and compute the draw.

    Returns the outcome and the reset round to install once the payout of
    `outcome.amount` to `outcome.winner` went through.
    """
    time_left = time_remaining(round_, current_time)
    log.debug("time left %d", time_left)
    if time_left > 0:
        raise RoundNotClosed(time_left)

    outcome = predict_draw(round_, current_time)
    log.debug("random index %d", outcome.index)
    return outcome, round_.reset(current_time)
