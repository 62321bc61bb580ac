from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .environment import LocalEnvironment, TimeSource, wall_clock
from .state import Round

STATE_FORMAT_VERSION = 1


@dataclass
class StoredState:
    round: Round
    env: LocalEnvironment


def load_state(path: str, clock: TimeSource = wall_clock) -> Optional[StoredState]:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        try:
            j = json.load(f)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"State file {path} is not valid JSON: {e}")

    version = j.get("version")
    if version != STATE_FORMAT_VERSION:
        raise RuntimeError(
            f"State file {path} has version {version}, expected {STATE_FORMAT_VERSION}"
        )
    return StoredState(
        round=Round.from_dict(j["round"]),
        env=LocalEnvironment.from_dict(j.get("ledger", {}), clock=clock),
    )


def save_state(path: str, state: StoredState) -> None:
    doc: Dict[str, Any] = {
        "version": STATE_FORMAT_VERSION,
        "round": state.round.to_dict(),
        "ledger": state.env.to_dict(),
    }
    # Temp file in the same directory so os.replace stays atomic.
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".lottery-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise
