from __future__ import annotations

import struct
from typing import Any, Dict, List, Optional

import httpx

from .project_constants import TIMESTAMP_NOW_STORAGE_KEY


class RpcClient:
    def __init__(self, rpc_url: str, timeout_s: float = 60.0) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s)

    def close(self) -> None:
        self.client.close()

    def _post(self, method: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params or [],
        }
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def get_block_timestamp(self) -> int:
        """Returns the best block's timestamp in milliseconds."""
        data = self._post("state_getStorage", [TIMESTAMP_NOW_STORAGE_KEY])
        return decode_timestamp(data.get("result"))


def decode_timestamp(storage_hex: Optional[str]) -> int:
    """Timestamp.Now is a SCALE u64 (little-endian)."""
    if not storage_hex:
        raise RuntimeError("Timestamp not available from node storage.")
    raw = bytes.fromhex(storage_hex[2:] if storage_hex.startswith("0x") else storage_hex)
    if len(raw) != 8:
        raise RuntimeError(f"Unexpected timestamp encoding: {storage_hex}")
    return struct.unpack("<Q", raw)[0]


def rpc_time_source(client: RpcClient):
    """Environment clock backed by the node, in whole seconds."""

    def now() -> int:
        return client.get_block_timestamp() // 1000

    return now
