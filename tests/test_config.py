import pytest

from round_lottery import config
from round_lottery.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    for name in ("LOTTERY_STATE_FILE", "NODE_RPC_URL", "LOTTERY_SS58_PREFIX"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings.from_env()
    assert s.state_file == "lottery_state.json"
    assert s.rpc_url is None
    assert s.ss58_prefix == 42


def test_env_values(monkeypatch):
    monkeypatch.setenv("LOTTERY_STATE_FILE", "/tmp/round.json")
    monkeypatch.setenv("NODE_RPC_URL", "http://localhost:9933")
    monkeypatch.setenv("LOTTERY_SS58_PREFIX", "0")
    s = Settings.from_env()
    assert s == Settings("/tmp/round.json", "http://localhost:9933", 0)


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("LOTTERY_STATE_FILE", "/tmp/round.json")
    monkeypatch.setenv("NODE_RPC_URL", "http://localhost:9933")
    s = Settings.from_env(
        state_file_override="other.json", rpc_url_override="http://node:9944"
    )
    assert s.state_file == "other.json"
    assert s.rpc_url == "http://node:9944"


def test_bad_prefix(monkeypatch):
    monkeypatch.setenv("LOTTERY_SS58_PREFIX", "polkadot")
    with pytest.raises(RuntimeError):
        Settings.from_env()
