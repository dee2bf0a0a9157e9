# src/wormy/runtime/block_hash.py
from __future__ import annotations

"""
Per-tx block sealing.

The executor seals every admitted tx as its own block. The resulting tip
hash chains blocks together and is the entropy source read by reward draws,
so the encoding below must stay byte-stable across releases.
"""

import hashlib
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict

Json = Dict[str, Any]

GENESIS_HASH = "0" * 64


def canon_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_hex(obj: Any) -> str:
    return hashlib.sha256(canon_json(obj).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class SealedHeader:
    chain_id: str
    height: int
    prev_block_hash: str
    block_ts: int
    tx_hash: str

    @classmethod
    def for_tx(cls, *, chain_id: str, height: int, prev_block_hash: str, block_ts: int, tx: Json) -> "SealedHeader":
        return cls(
            chain_id=str(chain_id),
            height=int(height),
            prev_block_hash=str(prev_block_hash or GENESIS_HASH),
            block_ts=int(block_ts),
            tx_hash=sha256_hex(tx),
        )

    def to_json(self) -> Json:
        return asdict(self)

    def block_hash(self) -> str:
        return sha256_hex(self.to_json())
