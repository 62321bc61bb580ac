from __future__ import annotations

import hashlib
from typing import List, Tuple

import base58

from .project_constants import DEFAULT_SS58_PREFIX

SS58_CHECKSUM_PREFIX = b"SS58PRE"
PUBLIC_KEY_LEN = 32
CHECKSUM_LEN = 2


def _checksum(payload: bytes) -> bytes:
    digest = hashlib.blake2b(SS58_CHECKSUM_PREFIX + payload, digest_size=64).digest()
    return digest[:CHECKSUM_LEN]


def encode_ss58(public_key: bytes, prefix: int = DEFAULT_SS58_PREFIX) -> str:
    if len(public_key) != PUBLIC_KEY_LEN:
        raise ValueError(f"Public key must be {PUBLIC_KEY_LEN} bytes")
    # Single-byte prefixes only (0-63).
    if not 0 <= prefix < 64:
        raise ValueError(f"Unsupported SS58 prefix {prefix}")
    payload = bytes([prefix]) + public_key
    return base58.b58encode(payload + _checksum(payload)).decode("ascii")


def decode_ss58(address: str) -> Tuple[int, bytes]:
    """
    Account layout once base58-decoded:
    Prefix(0-1) | PublicKey(1-33) | Checksum(33-35)
    """
    try:
        raw = base58.b58decode(address.strip())
    except ValueError as e:
        raise ValueError(f"{address!r} is not base58: {e}") from e

    if len(raw) != 1 + PUBLIC_KEY_LEN + CHECKSUM_LEN:
        raise ValueError(f"{address!r} has unexpected length {len(raw)}")

    payload, checksum = raw[:-CHECKSUM_LEN], raw[-CHECKSUM_LEN:]
    if _checksum(payload) != checksum:
        raise ValueError(f"{address!r} has a bad checksum")
    return payload[0], payload[1:]


def normalize_account(address: str, prefix: int = DEFAULT_SS58_PREFIX) -> str:
    """Validate an address and re-encode it in the configured network format."""
    _, public_key = decode_ss58(address)
    return encode_ss58(public_key, prefix)


def load_accounts(path: str, prefix: int = DEFAULT_SS58_PREFIX) -> List[str]:
    out: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            a = line.strip()
            if not a or a.startswith("#"):
                continue
            out.append(normalize_account(a, prefix))
    return out
