# src/wormy/runtime/entropy.py
from __future__ import annotations

from typing import Callable, Protocol


class EntropySource(Protocol):
    """Block-level "difficulty" value mixed into reward draws.

    This is chain state. Anyone who can observe or order transactions can
    predict it, so it is only fit for low-value gamification draws.
    """

    def difficulty(self) -> int: ...


class StaticEntropy:
    def __init__(self, value: int = 0) -> None:
        self.value = int(value)

    def difficulty(self) -> int:
        return int(self.value)


class BlockEntropy:
    """Entropy read from the current tip hash (hex) of a block producer."""

    def __init__(self, tip_hash: Callable[[], str]) -> None:
        self._tip_hash = tip_hash

    def difficulty(self) -> int:
        h = str(self._tip_hash() or "").strip()
        if not h:
            return 0
        return int(h, 16)
