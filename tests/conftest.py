import pytest

from round_lottery.contract import LotteryContract
from round_lottery.environment import LocalEnvironment

CREATED_AT = 1_700_000_000


class Clock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return Clock(CREATED_AT)


@pytest.fixture
def env(clock):
    env = LocalEnvironment(clock=clock)
    for name in ("organizer", "alice", "bob", "carol"):
        env.credit(name, 1_000)
    return env


@pytest.fixture
def contract(env):
    env.caller = "organizer"
    c = LotteryContract.create(env, ticket_price=100)
    env.caller = ""
    return c


@pytest.fixture
def buy(env, contract):
    def _buy(who, amount=100):
        with env.invoke(who, amount):
            contract.buy_ticket()

    return _buy
