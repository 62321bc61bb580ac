import pytest

from round_lottery.contract import LotteryContract
from round_lottery.environment import LocalEnvironment
from round_lottery.errors import (
    InvalidPayment,
    PayoutFailed,
    RoundNotClosed,
    UpgradeFailed,
)
from round_lottery.project_constants import DEFAULT_TICKET_PRICE, ROUND_DURATION_S

CREATED_AT = 1_700_000_000
CLOSE_TIME = CREATED_AT + ROUND_DURATION_S


def test_create_with_defaults(clock):
    env = LocalEnvironment(clock=clock, caller="organizer")
    c = LotteryContract.create(env)
    assert c.ticket_price == DEFAULT_TICKET_PRICE
    assert c.close_time == CREATED_AT + ROUND_DURATION_S
    assert c.round.organizer == "organizer"
    assert c.round.seed_counter == 1
    assert c.pool_total() == 0


def test_create_with_explicit_config_round_trips(clock):
    env = LocalEnvironment(clock=clock, caller="organizer")
    c = LotteryContract.create(env, ticket_price=250, close_time=42)
    assert c.ticket_price == 250
    assert c.close_time == 42


def test_three_tickets_then_draw(clock, env, contract, buy):
    for who in ("alice", "bob", "carol"):
        buy(who)
    assert contract.pool_total() == 300
    assert len(contract.round.participants) == 3
    assert env.custody == 300

    # (CLOSE_TIME + 1 + 5) % 4 == 2
    clock.now = CLOSE_TIME + 1
    assert contract.time_remaining() == 0
    outcome = contract.draw()

    assert outcome.winner == "carol"
    assert outcome.winner in ("alice", "bob", "carol")
    assert env.balances["carol"] == 1_000 - 100 + 300
    assert env.custody == 0
    assert contract.pool_total() == 0
    assert contract.round.participants == ()
    assert contract.round.seed_counter == 1
    assert contract.close_time == CLOSE_TIME + 1 + ROUND_DURATION_S
    assert contract.close_time > clock.now


def test_top_index_falls_back_to_organizer(clock, env, contract, buy):
    for who in ("alice", "bob", "carol"):
        buy(who)

    # (CLOSE_TIME + 2 + 5) % 4 == 3, one past the last participant
    clock.now = CLOSE_TIME + 2
    outcome = contract.draw()

    assert outcome.organizer_fallback
    assert outcome.winner == "organizer"
    assert env.balances["organizer"] == 1_300


def test_empty_round_pays_organizer_and_resets(clock, env, contract):
    clock.now = CLOSE_TIME + 10
    outcome = contract.draw()

    assert outcome.winner == "organizer"
    assert outcome.amount == 0
    assert contract.close_time == CLOSE_TIME + 10 + ROUND_DURATION_S
    assert contract.round.seed_counter == 1


def test_draw_before_close_leaves_round_untouched(clock, contract, buy):
    buy("alice")
    before = contract.round

    clock.now = CLOSE_TIME - 1
    with pytest.raises(RoundNotClosed):
        contract.draw()
    assert contract.round == before
    assert contract.round.seed_counter == 2


def test_failed_payout_aborts_draw(clock, env, contract, buy):
    for who in ("alice", "bob", "carol"):
        buy(who)
    before = contract.round
    env.rejecting.add("carol")

    clock.now = CLOSE_TIME + 1
    with pytest.raises(PayoutFailed) as exc:
        contract.draw()

    assert exc.value.winner == "carol"
    assert exc.value.amount == 300
    assert contract.round == before
    assert env.custody == 300


def test_invalid_payment_is_refunded(env, contract):
    with pytest.raises(InvalidPayment):
        with env.invoke("alice", 99):
            contract.buy_ticket()

    assert contract.pool_total() == 0
    assert contract.round.participants == ()
    assert env.balances["alice"] == 1_000
    assert env.custody == 0


def test_round_cycles_after_draw(clock, contract, buy):
    buy("alice")
    clock.now = CLOSE_TIME
    contract.draw()

    buy("bob")
    assert contract.round.participants == ("bob",)
    assert contract.pool_total() == 100
    assert contract.time_remaining() == ROUND_DURATION_S


def test_set_code(env, contract):
    contract.set_code(b"\x11" * 32)
    assert env.code_hash == b"\x11" * 32


def test_set_code_failure(env, contract):
    with pytest.raises(UpgradeFailed):
        contract.set_code(b"\x11" * 4)
    assert env.code_hash is None


def test_negative_ticket_price_is_refused(clock):
    env = LocalEnvironment(clock=clock, caller="organizer")
    with pytest.raises(ValueError):
        LotteryContract.create(env, ticket_price=-1)


def test_free_tickets_are_allowed(clock):
    env = LocalEnvironment(clock=clock, caller="organizer")
    assert LotteryContract.create(env, ticket_price=0).ticket_price == 0
