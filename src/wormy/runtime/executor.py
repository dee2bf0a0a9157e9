# src/wormy/runtime/executor.py
from __future__ import annotations

"""
Serialized tx executor.

Txs are applied strictly one at a time. Each admitted tx is sealed as its
own block: height advances and the tip hash chains over the previous hash,
the block timestamp and the tx. The tip hash doubles as the block
"difficulty" entropy read by reward draws.

Admission checks (signer present, nonce == last + 1) reject without
consuming the nonce. Once admitted, the nonce is consumed even when the
module rejects the tx; the rejection is returned as a receipt and module
state is left exactly as it was.
"""

import copy
import logging
import threading
from typing import Any, Dict, List, Optional

from wormy.ledger.token import TokenLedger
from wormy.runtime.block_hash import GENESIS_HASH, SealedHeader
from wormy.runtime.clock import Clock
from wormy.runtime.domain_apply import apply_tx
from wormy.runtime.errors import WormyError
from wormy.runtime.events import EventLog
from wormy.runtime.metrics import inc_counter, set_gauge
from wormy.runtime.module import WormyModule
from wormy.runtime.tx_types import TxEnvelope
from wormy.util.structured_logging import log_event

Json = Dict[str, Any]


class WormyExecutor:
    def __init__(
        self,
        *,
        chain_id: str,
        clock: Clock,
        events: Optional[EventLog] = None,
        ledger: Optional[TokenLedger] = None,
        config: Optional[Any] = None,
        max_receipts: int = 1_000,
    ) -> None:
        self.chain_id = str(chain_id)
        self.clock = clock
        self.ledger = ledger
        self.config = config
        self.events = events if events is not None else EventLog()
        self.modules: Dict[str, WormyModule] = {}
        self.height = 0
        self.tip_hash = GENESIS_HASH
        self.tip_ts = 0
        self._nonces: Dict[str, int] = {}
        self._receipts: List[Json] = []
        self._max_receipts = int(max_receipts)
        self._lock = threading.Lock()
        self._log = logging.getLogger("wormy.executor")

    def register(self, name: str, module: WormyModule) -> None:
        if name in self.modules:
            raise ValueError(f"module already registered: {name}")
        self.modules[name] = module

    def module(self, name: str) -> WormyModule:
        return self.modules[name]

    def nonce_of(self, signer: str) -> int:
        return int(self._nonces.get(str(signer), 0))

    def _seal(self, env: TxEnvelope) -> None:
        now = self.clock.now()
        ts = now if now >= self.tip_ts else self.tip_ts
        header = SealedHeader.for_tx(
            chain_id=self.chain_id,
            height=self.height + 1,
            prev_block_hash=self.tip_hash,
            block_ts=ts,
            tx=env.to_json(),
        )
        self.tip_hash = header.block_hash()
        self.height += 1
        self.tip_ts = ts
        set_gauge("height", self.height)

    def _keep(self, receipt: Json) -> Json:
        self._receipts.append(receipt)
        if len(self._receipts) > self._max_receipts:
            del self._receipts[: len(self._receipts) - self._max_receipts]
        return receipt

    def submit(self, tx: Any) -> Json:
        """Apply one tx; always returns a receipt, never swallows a rejection."""
        with self._lock:
            try:
                env = TxEnvelope.from_json(tx)
            except (TypeError, ValueError) as e:
                inc_counter("tx_receipts", outcome="refused")
                return {"ok": False, "code": "invalid_tx", "reason": "malformed_envelope", "details": {"err": str(e)}}

            if not env.signer:
                inc_counter("tx_receipts", outcome="refused")
                return {"ok": False, "tx_type": env.tx_type, "code": "invalid_tx", "reason": "missing_signer", "details": None}

            expected = self.nonce_of(env.signer) + 1
            if env.nonce != expected:
                inc_counter("tx_receipts", outcome="refused")
                return {
                    "ok": False,
                    "tx_type": env.tx_type,
                    "code": "bad_nonce",
                    "reason": "nonce_mismatch",
                    "details": {"expected": expected, "got": env.nonce},
                }

            # Entropy for this tx is the tip hash before it is sealed.
            try:
                meta = apply_tx(self.modules, env)
                receipt: Json = {"ok": True, "tx_type": env.tx_type, "signer": env.signer, "nonce": env.nonce, "result": meta["result"]}
                inc_counter("tx_receipts", outcome="applied")
            except WormyError as e:
                receipt = {
                    "ok": False,
                    "tx_type": env.tx_type,
                    "signer": env.signer,
                    "nonce": env.nonce,
                    "code": e.code,
                    "reason": e.reason,
                    "details": e.details,
                }
                inc_counter("tx_receipts", outcome="rejected")
            except Exception as e:
                # Module state was already rolled back by the call scope.
                self._log.exception("tx_apply_crashed tx_type=%s signer=%s", env.tx_type, env.signer)
                receipt = {
                    "ok": False,
                    "tx_type": env.tx_type,
                    "signer": env.signer,
                    "nonce": env.nonce,
                    "code": "internal_error",
                    "reason": "apply_crashed",
                    "details": {"error": type(e).__name__},
                }
                inc_counter("tx_receipts", outcome="rejected")

            self._nonces[env.signer] = env.nonce
            self._seal(env)
            receipt["height"] = self.height
            receipt["block_hash"] = self.tip_hash
            log_event(
                self._log,
                "tx_receipt",
                tx_type=env.tx_type,
                signer=env.signer,
                ok=receipt["ok"],
                height=self.height,
                code=receipt.get("code"),
            )
            return self._keep(receipt)

    def receipts(self, *, limit: int = 100) -> List[Json]:
        with self._lock:
            return list(self._receipts[-int(limit):]) if limit > 0 else list(self._receipts)

    def read_state(self) -> Json:
        with self._lock:
            return {
                "chain_id": self.chain_id,
                "height": self.height,
                "tip_hash": self.tip_hash,
                "tip_ts": self.tip_ts,
                "modules": {name: copy.deepcopy(m.state) for name, m in self.modules.items()},
            }
