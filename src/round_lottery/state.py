from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from .project_constants import (
    DEFAULT_TICKET_PRICE,
    INITIAL_SEED_COUNTER,
    ROUND_DURATION_S,
)


@dataclass(frozen=True)
class Round:
    """
    Snapshot of the live lottery round.

    Rounds are never mutated: every accepted operation returns a new value,
    so a failed call simply keeps the previous snapshot.
    """

    organizer: str
    ticket_price: int
    close_time: int
    participants: Tuple[str, ...] = field(default_factory=tuple)
    pool: int = 0
    seed_counter: int = INITIAL_SEED_COUNTER

    @staticmethod
    def create(
        organizer: str,
        now: int,
        ticket_price: Optional[int] = None,
        close_time: Optional[int] = None,
    ) -> "Round":
        if ticket_price is None:
            ticket_price = DEFAULT_TICKET_PRICE
        if close_time is None:
            close_time = now + ROUND_DURATION_S
        if ticket_price < 0:
            raise ValueError(f"Ticket price must not be negative, got {ticket_price}")
        return Round(
            organizer=organizer,
            ticket_price=int(ticket_price),
            close_time=int(close_time),
        )

    def with_ticket(self, caller: str, paid_amount: int) -> "Round":
        return replace(
            self,
            participants=self.participants + (caller,),
            pool=self.pool + paid_amount,
            seed_counter=self.seed_counter + 1,
        )

    def with_seed_bumped(self) -> "Round":
        return replace(self, seed_counter=self.seed_counter + 1)

    def reset(self, now: int) -> "Round":
        # Organizer and ticket price carry over into the next round.
        return replace(
            self,
            participants=(),
            pool=0,
            close_time=now + ROUND_DURATION_S,
            seed_counter=INITIAL_SEED_COUNTER,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organizer": self.organizer,
            "ticket_price": self.ticket_price,
            "close_time": self.close_time,
            "participants": list(self.participants),
            "pool": self.pool,
            "seed_counter": self.seed_counter,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Round":
        return Round(
            organizer=d["organizer"],
            ticket_price=int(d["ticket_price"]),
            close_time=int(d["close_time"]),
            participants=tuple(d.get("participants", [])),
            pool=int(d.get("pool", 0)),
            seed_counter=int(d.get("seed_counter", INITIAL_SEED_COUNTER)),
        )
