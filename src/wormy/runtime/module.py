# src/wormy/runtime/module.py
from __future__ import annotations

"""
Shared call discipline for every Wormy module.

One mutating call is:
  1. reentrancy guard entered (nested calls fail with ReentrantCall)
  2. ``now`` sampled once from the trusted clock, difficulty sampled once
  3. module state and config checkpointed
  4. the action runs; events are buffered on the CallContext
  5. on success buffered events are published; on any failure state and
     config are restored and buffered events are dropped
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Type

from wormy.ledger.token import TokenLedger
from wormy.poh.oracle import IdentityOracle
from wormy.runtime.admin_config import AdministrativeConfig, ModuleParams, build_params
from wormy.runtime.clock import Clock
from wormy.runtime.day_bucket import (
    SECONDS_PER_DAY,
    day_index_of,
    seconds_until_next_day,
    validate_seconds_per_day,
)
from wormy.runtime.entropy import EntropySource, StaticEntropy
from wormy.runtime.errors import (
    IdentityVerificationFailed,
    InsufficientLedgerBalance,
    InvalidConfiguration,
    ModuleInactive,
    TransferFailed,
    WormyError,
)
from wormy.runtime.events import EventLog
from wormy.runtime.guard import ReentrancyGuard, state_transaction
from wormy.runtime.metrics import inc_counter
from wormy.util.structured_logging import log_event

Json = Dict[str, Any]


@dataclass
class CallContext:
    module: str
    address: str
    caller: str
    now: int
    day: int
    difficulty: int
    pending: List[Json] = field(default_factory=list)

    def emit(self, event: str, **fields: Any) -> Json:
        ev: Json = {
            "module": self.module,
            "address": self.address,
            "event": str(event),
            "ts": int(self.now),
            "day": int(self.day),
        }
        ev.update(fields)
        self.pending.append(ev)
        return ev


class WormyModule:
    MODULE = "module"
    PARAMS: Type[ModuleParams] = ModuleParams

    def __init__(
        self,
        *,
        address: str,
        admin: str,
        clock: Clock,
        ledger: Optional[TokenLedger] = None,
        oracle: Optional[IdentityOracle] = None,
        entropy: Optional[EntropySource] = None,
        events: Optional[EventLog] = None,
        params: Optional[Json] = None,
        seconds_per_day: int = SECONDS_PER_DAY,
        start_time: int = 0,
    ) -> None:
        addr = str(address or "").strip()
        if not addr:
            raise InvalidConfiguration(reason="missing_module_address")
        self.address = addr
        self.clock = clock
        self.ledger = ledger
        self.oracle = oracle
        self.entropy: EntropySource = entropy if entropy is not None else StaticEntropy()
        self.events = events if events is not None else EventLog()
        self.seconds_per_day = validate_seconds_per_day(seconds_per_day)
        self.start_time = int(start_time)
        self.config = AdministrativeConfig(admin=admin, params=build_params(self.PARAMS, params))
        self.state: Json = {}
        self._guard = ReentrancyGuard(self.MODULE)
        self._log = logging.getLogger(f"wormy.modules.{self.MODULE}")

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def day_of(self, now: int) -> int:
        return day_index_of(now, seconds_per_day=self.seconds_per_day, start_time=self.start_time)

    def today(self) -> int:
        return self.day_of(self.clock.now())

    def seconds_until_next_day(self, now: Optional[int] = None) -> int:
        ts = self.clock.now() if now is None else int(now)
        return seconds_until_next_day(ts, seconds_per_day=self.seconds_per_day, start_time=self.start_time)

    # ------------------------------------------------------------------
    # Call scope
    # ------------------------------------------------------------------

    @property
    def params(self) -> Any:
        return self.config.params

    @contextmanager
    def call(self, caller: str) -> Iterator[CallContext]:
        who = str(caller or "").strip()
        # Stays None when the guard refuses entry: a nested call must not restore the outer call's config.
        cp = None
        try:
            with self._guard.enter():
                now = self.clock.now()
                ctx = CallContext(
                    module=self.MODULE,
                    address=self.address,
                    caller=who,
                    now=now,
                    day=self.day_of(now),
                    difficulty=int(self.entropy.difficulty()),
                )
                cp = self.config.checkpoint()
                with state_transaction(self.state):
                    yield ctx
        except WormyError as e:
            if cp is not None:
                self.config.restore(cp)
            inc_counter("module_calls", module=self.MODULE, outcome="rejected")
            log_event(self._log, "call_rejected", module=self.MODULE, caller=who, code=e.code, reason=e.reason)
            raise
        except BaseException:
            if cp is not None:
                self.config.restore(cp)
            raise

        inc_counter("module_calls", module=self.MODULE, outcome="committed")
        if ctx.pending:
            self.events.publish(ctx.pending)

    # ------------------------------------------------------------------
    # Shared preconditions and effects
    # ------------------------------------------------------------------

    def _require_active(self) -> None:
        if not bool(self.params.active):
            raise ModuleInactive(details={"module": self.MODULE})

    def _verify_identity(self, ctx: CallContext, signature: bytes) -> None:
        if self.oracle is None:
            raise IdentityVerificationFailed(reason="no_identity_oracle", details={"module": self.MODULE})
        if not ctx.caller or not self.oracle.verify(bytes(signature or b""), ctx.caller):
            raise IdentityVerificationFailed(details={"identity": ctx.caller})

    def pool_balance(self) -> int:
        if self.ledger is None:
            return 0
        return int(self.ledger.balance_of(self.address))

    def _pay(self, to: str, amount: int) -> None:
        """Transfer ``amount`` from the module pool. Must be the last effect of a call."""
        amt = int(amount)
        if amt <= 0:
            return
        if self.ledger is None:
            raise TransferFailed(reason="no_ledger", details={"module": self.MODULE})
        bal = self.pool_balance()
        if bal < amt:
            raise InsufficientLedgerBalance(details={"module": self.MODULE, "balance": bal, "amount": amt})
        if not self.ledger.transfer(to, amt, sender=self.address):
            raise TransferFailed(details={"module": self.MODULE, "to": to, "amount": amt})

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def set_config(self, caller: str, changes: Json) -> Json:
        with self.call(caller) as ctx:
            change = self.config.update(ctx.caller, changes)
            ctx.emit("config_updated", identity=ctx.caller, before=change["before"], after=change["after"])
        return change

    def transfer_admin(self, caller: str, new_admin: str) -> Json:
        with self.call(caller) as ctx:
            change = self.config.transfer_admin(ctx.caller, new_admin)
            ctx.emit("config_updated", identity=ctx.caller, before=change["before"], after=change["after"])
        return change

    def config_view(self) -> Json:
        out = self.config.snapshot()
        out.update(
            {
                "module": self.MODULE,
                "address": self.address,
                "seconds_per_day": self.seconds_per_day,
                "start_time": self.start_time,
            }
        )
        return out
