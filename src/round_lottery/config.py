from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .project_constants import DEFAULT_SS58_PREFIX


@dataclass(frozen=True)
class Settings:
    state_file: str
    rpc_url: Optional[str]
    ss58_prefix: int

    @staticmethod
    def from_env(
        state_file_override: str | None = None,
        rpc_url_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        state_file = state_file_override or os.getenv("LOTTERY_STATE_FILE", "").strip()

        # If user provides --rpc-url, trust it. Without any URL the wall clock is used.
        rpc_url = rpc_url_override or os.getenv("NODE_RPC_URL", "").strip() or None

        prefix_raw = os.getenv("LOTTERY_SS58_PREFIX", "").strip()
        try:
            ss58_prefix = int(prefix_raw) if prefix_raw else DEFAULT_SS58_PREFIX
        except ValueError:
            raise RuntimeError(
                f"LOTTERY_SS58_PREFIX must be an integer, got {prefix_raw!r}"
            )

        return Settings(
            state_file=state_file or "lottery_state.json",
            rpc_url=rpc_url,
            ss58_prefix=ss58_prefix,
        )
