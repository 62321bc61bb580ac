from __future__ import annotations


class LotteryError(Exception):
    """Base class for every rejected lottery call."""


class InvalidPayment(LotteryError):
    def __init__(self, paid_amount: int, ticket_price: int) -> None:
        super().__init__(
            f"Invalid payment: paid {paid_amount}, ticket price is {ticket_price}"
        )
        self.paid_amount = paid_amount
        self.ticket_price = ticket_price


class RoundNotClosed(LotteryError):
    def __init__(self, time_left: int) -> None:
        super().__init__(f"Round not closed: {time_left}s remaining")
        self.time_left = time_left


class PayoutFailed(LotteryError):
    def __init__(self, winner: str, amount: int) -> None:
        super().__init__(f"Payout of {amount} to {winner} failed")
        self.winner = winner
        self.amount = amount


class UpgradeFailed(LotteryError):
    def __init__(self, code_hash: bytes) -> None:
        super().__init__(f"Failed to switch code hash to 0x{code_hash.hex()}")
        self.code_hash = code_hash


class TransferError(RuntimeError):
    """Raised by an environment when funds cannot be moved."""


class DeployError(RuntimeError):
    """Raised by an environment when new logic cannot be deployed."""
