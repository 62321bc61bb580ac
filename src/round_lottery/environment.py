from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Set

from .errors import DeployError, TransferError

log = logging.getLogger(__name__)

TimeSource = Callable[[], int]


def wall_clock() -> int:
    return int(time.time())


class Environment(Protocol):
    """Capabilities the hosting runtime provides to the lottery."""

    def current_caller(self) -> str: ...

    def current_time(self) -> int: ...

    def transferred_amount(self) -> int: ...

    def transfer(self, to: str, amount: int) -> None: ...

    def deploy_new_logic(self, code_hash: bytes) -> None: ...


@dataclass
class LocalEnvironment:
    """
    In-process ledger standing in for the hosting runtime.

    `custody` is what the contract holds. Values attached to a call are moved
    from the caller's balance into custody by `invoke` and handed back if the
    call raises. Accounts in `rejecting` refuse incoming transfers.
    """

    balances: Dict[str, int] = field(default_factory=dict)
    custody: int = 0
    code_hash: Optional[bytes] = None
    rejecting: Set[str] = field(default_factory=set)
    clock: TimeSource = wall_clock
    caller: str = ""
    value: int = 0

    def current_caller(self) -> str:
        return self.caller

    def current_time(self) -> int:
        return self.clock()

    def transferred_amount(self) -> int:
        return self.value

    def credit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise TransferError(f"Cannot credit a negative amount to {account}")
        self.balances[account] = self.balances.get(account, 0) + amount

    def transfer(self, to: str, amount: int) -> None:
        if to in self.rejecting:
            raise TransferError(f"{to} cannot receive funds")
        if amount > self.custody:
            raise TransferError(
                f"Insufficient custody: need {amount}, hold {self.custody}"
            )
        self.custody -= amount
        self.credit(to, amount)
        log.debug("Transferred %d to %s", amount, to)

    def deploy_new_logic(self, code_hash: bytes) -> None:
        if len(code_hash) != 32:
            raise DeployError(f"Code hash must be 32 bytes, got {len(code_hash)}")
        self.code_hash = bytes(code_hash)

    @contextmanager
    def invoke(self, caller: str, value: int = 0) -> Iterator["LocalEnvironment"]:
        if value < 0:
            raise TransferError("Cannot attach a negative value")
        available = self.balances.get(caller, 0)
        if value > available:
            raise TransferError(
                f"{caller} holds {available}, cannot attach {value}"
            )

        self.balances[caller] = available - value
        self.custody += value
        self.caller, self.value = caller, value
        try:
            yield self
        except BaseException:
            self.custody -= value
            self.credit(caller, value)
            raise
        finally:
            self.caller, self.value = "", 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balances": dict(self.balances),
            "custody": self.custody,
            "code_hash": self.code_hash.hex() if self.code_hash else None,
            "rejecting": sorted(self.rejecting),
        }

    @staticmethod
    def from_dict(
        d: Dict[str, Any], clock: TimeSource = wall_clock
    ) -> "LocalEnvironment":
        code_hash = d.get("code_hash")
        return LocalEnvironment(
            balances={k: int(v) for k, v in d.get("balances", {}).items()},
            custody=int(d.get("custody", 0)),
            code_hash=bytes.fromhex(code_hash) if code_hash else None,
            rejecting=set(d.get("rejecting", [])),
            clock=clock,
        )
