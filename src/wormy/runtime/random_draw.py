# src/wormy/runtime/random_draw.py
from __future__ import annotations

"""
Pseudo-random reward draws from on-chain state.

WARNING: this is NOT secure randomness. The seed is a hash of the block
timestamp, the caller identity, the block difficulty value and the module
address. All four are public or predictable at call time, and whoever
orders transactions or nudges the timestamp can steer the outcome. Use it
only for low-value gamification rewards. Higher-stakes draws need a
verifiable-randomness collaborator instead.
"""

import hashlib
import json
from dataclasses import dataclass

from wormy.runtime.errors import InvalidConfiguration


@dataclass(frozen=True)
class SeedMaterial:
    block_timestamp: int
    difficulty: int
    contract_address: str


def derive_seed(*, block_timestamp: int, identity: str, difficulty: int, contract_address: str) -> int:
    """Return a 256-bit integer derived from the given chain state."""
    payload = json.dumps(
        [int(block_timestamp), str(identity), int(difficulty), str(contract_address)],
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    return int.from_bytes(hashlib.sha256(payload).digest(), "big")


def draw(identity: str, seed_material: SeedMaterial, low: int, high: int) -> int:
    """Map the seed for ``identity`` uniformly into ``[low, high]``."""
    low = int(low)
    high = int(high)
    if low > high:
        raise InvalidConfiguration(reason="draw_range_inverted", details={"min": low, "max": high})

    span = high - low + 1
    if span == 1:
        return low

    seed = derive_seed(
        block_timestamp=seed_material.block_timestamp,
        identity=identity,
        difficulty=seed_material.difficulty,
        contract_address=seed_material.contract_address,
    )
    return low + (seed % span)
