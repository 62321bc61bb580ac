import pytest

from round_lottery.environment import LocalEnvironment
from round_lottery.errors import DeployError, TransferError


def test_invoke_escrows_value_for_the_call():
    env = LocalEnvironment(clock=lambda: 7)
    env.credit("alice", 500)

    with env.invoke("alice", 200) as e:
        assert e.current_caller() == "alice"
        assert e.transferred_amount() == 200
        assert e.current_time() == 7
        assert env.custody == 200

    assert env.balances["alice"] == 300
    assert env.custody == 200
    assert env.current_caller() == ""
    assert env.transferred_amount() == 0


def test_invoke_refunds_when_the_call_raises():
    env = LocalEnvironment()
    env.credit("alice", 500)

    with pytest.raises(ValueError):
        with env.invoke("alice", 200):
            raise ValueError("boom")

    assert env.balances["alice"] == 500
    assert env.custody == 0


def test_invoke_rejects_overdraft():
    env = LocalEnvironment()
    env.credit("alice", 50)
    with pytest.raises(TransferError):
        with env.invoke("alice", 100):
            pass
    assert env.balances["alice"] == 50


def test_transfer_limits():
    env = LocalEnvironment(custody=100, rejecting={"mallory"})
    with pytest.raises(TransferError):
        env.transfer("mallory", 10)
    with pytest.raises(TransferError):
        env.transfer("bob", 101)
    env.transfer("bob", 100)
    assert env.balances == {"bob": 100}
    assert env.custody == 0


def test_deploy_requires_32_byte_hash():
    env = LocalEnvironment()
    with pytest.raises(DeployError):
        env.deploy_new_logic(b"short")
    env.deploy_new_logic(bytes(range(32)))
    assert env.code_hash == bytes(range(32))


def test_credit_refuses_negative_amounts():
    env = LocalEnvironment()
    with pytest.raises(TransferError):
        env.credit("alice", -500)
    assert env.balances == {}


def test_ledger_dict_round_trip():
    env = LocalEnvironment(
        balances={"a": 1}, custody=5, code_hash=b"\x01" * 32, rejecting={"z"}
    )
    restored = LocalEnvironment.from_dict(env.to_dict())
    assert restored.balances == {"a": 1}
    assert restored.custody == 5
    assert restored.code_hash == b"\x01" * 32
    assert restored.rejecting == {"z"}
