# src/wormy/ledger/token.py
from __future__ import annotations

import threading
from typing import Any, Dict, Protocol

Json = Dict[str, Any]


class TokenLedger(Protocol):
    """Fungible-token ledger the modules pay out through.

    ``transfer`` returns False (or raises) on failure; callers must treat a
    False return as a hard error.
    """

    def balance_of(self, identity: str) -> int: ...

    def transfer(self, to: str, amount: int, *, sender: str) -> bool: ...


class InMemoryTokenLedger:
    """Process-local fungible ledger with standard transfer semantics."""

    def __init__(self, *, symbol: str = "WORMY") -> None:
        self.symbol = str(symbol)
        self._lock = threading.Lock()
        self._balances: Dict[str, int] = {}
        self.total_supply = 0

    def balance_of(self, identity: str) -> int:
        with self._lock:
            return int(self._balances.get(str(identity), 0))

    def mint(self, to: str, amount: int) -> None:
        amt = int(amount)
        if amt <= 0:
            raise ValueError("mint amount must be > 0")
        with self._lock:
            self._balances[str(to)] = int(self._balances.get(str(to), 0)) + amt
            self.total_supply += amt

    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        amt = int(amount)
        to_s = str(to or "").strip()
        sender_s = str(sender or "").strip()
        if amt < 0 or not to_s or not sender_s:
            return False
        with self._lock:
            bal = int(self._balances.get(sender_s, 0))
            if bal < amt:
                return False
            self._balances[sender_s] = bal - amt
            self._balances[to_s] = int(self._balances.get(to_s, 0)) + amt
        return True

    def snapshot(self) -> Json:
        with self._lock:
            return {"symbol": self.symbol, "total_supply": int(self.total_supply), "balances": dict(self._balances)}
