from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from .draw import DrawOutcome, pseudo_random, select_winner
from .state import Round

TOOL_NAME = "round-lottery"
TOOL_VERSION = "1.0.0"


def build_audit(round_before: Round, outcome: DrawOutcome) -> Dict[str, Any]:
    """Everything needed to re-derive a draw, in draw order."""
    return {
        "metadata": {
            "tool": TOOL_NAME,
            "version": TOOL_VERSION,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "organizer": round_before.organizer,
            "ticket_price": round_before.ticket_price,
            "close_time": round_before.close_time,
            "draw_timestamp": outcome.timestamp,
            "seed_counter": outcome.seed_counter,
            "participant_count": outcome.participant_count,
            "random_index": outcome.index,
            "pool": outcome.amount,
        },
        "winner": {
            "address": outcome.winner,
            "organizer_fallback": outcome.organizer_fallback,
        },
        "participants": list(round_before.participants),
    }


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    participants = [str(p) for p in audit["participants"]]
    count = int(meta["participant_count"])
    if count != len(participants):
        raise RuntimeError(
            f"Participant count mismatch: audit={count} recomputed={len(participants)}"
        )

    pool = int(meta["pool"])
    expected_pool = int(meta["ticket_price"]) * len(participants)
    if pool != expected_pool:
        raise RuntimeError(f"Pool mismatch: audit={pool} recomputed={expected_pool}")

    seed_counter = int(meta["seed_counter"])
    # One increment per ticket and one for the draw itself.
    if seed_counter != len(participants) + 2:
        raise RuntimeError(
            f"Seed counter mismatch: audit={seed_counter} recomputed={len(participants) + 2}"
        )

    timestamp = int(meta["draw_timestamp"])
    if timestamp < int(meta["close_time"]):
        raise RuntimeError(
            f"Draw at {timestamp} happened before close time {meta['close_time']}"
        )

    index = pseudo_random(seed_counter, len(participants), timestamp)
    if index != int(meta["random_index"]):
        raise RuntimeError(
            f"Random index mismatch: audit={meta['random_index']} recomputed={index}"
        )

    round_ = Round(
        organizer=meta["organizer"],
        ticket_price=int(meta["ticket_price"]),
        close_time=int(meta["close_time"]),
        participants=tuple(participants),
        pool=pool,
    )
    winner = select_winner(round_, index)
    winner_expected = audit["winner"]["address"]
    if winner != winner_expected:
        raise RuntimeError(f"Winner mismatch: audit={winner_expected} recomputed={winner}")

    return {
        "ok": True,
        "winner": winner,
        "random_index": index,
        "participant_count": len(participants),
        "pool": pool,
        "organizer_fallback": index >= len(participants),
    }
