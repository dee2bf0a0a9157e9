# src/wormy/runtime/executor_boot.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type

from wormy.ledger.token import InMemoryTokenLedger, TokenLedger
from wormy.modules.daily_game import DailyGameModule
from wormy.modules.faucet import FaucetModule
from wormy.modules.fuel import FuelModule
from wormy.modules.pitstop import PitStopModule
from wormy.modules.race import RaceModule
from wormy.modules.vesting import LinearVestingLedger
from wormy.poh.oracle import AllowAllOracle, Ed25519PohOracle, IdentityOracle
from wormy.runtime.chain_config import ChainConfig, load_chain_config
from wormy.runtime.clock import Clock, SystemClock
from wormy.runtime.entropy import BlockEntropy
from wormy.runtime.executor import WormyExecutor
from wormy.runtime.module import WormyModule
from wormy.util.structured_logging import log_event

_log = logging.getLogger("wormy.boot")

MODULE_CLASSES: Dict[str, Type[WormyModule]] = {
    "pitstop": PitStopModule,
    "fuel": FuelModule,
    "race": RaceModule,
    "faucet": FaucetModule,
    "game": DailyGameModule,
    "vesting": LinearVestingLedger,
}


def module_address(chain_id: str, name: str) -> str:
    return f"{chain_id}:{name}"


def _oracle_for(cfg: ChainConfig) -> IdentityOracle:
    pk = str(cfg.poh_authority_pubkey or "").strip()
    if pk:
        return Ed25519PohOracle(pk)
    if cfg.mode == "dev":
        log_event(_log, "poh_oracle_allow_all", mode=cfg.mode)
        return AllowAllOracle()
    raise ValueError("poh_authority_pubkey is required outside dev mode")


def build_executor(
    cfg: Optional[ChainConfig] = None,
    *,
    clock: Optional[Clock] = None,
    ledger: Optional[TokenLedger] = None,
    oracle: Optional[IdentityOracle] = None,
) -> WormyExecutor:
    """Wire every module against one ledger, oracle, clock and event log."""
    cfg = cfg or load_chain_config()
    clk: Clock = clock or SystemClock()
    tok: Any = ledger if ledger is not None else InMemoryTokenLedger()
    poh = oracle if oracle is not None else _oracle_for(cfg)

    ex = WormyExecutor(chain_id=cfg.chain_id, clock=clk, ledger=tok, config=cfg)
    entropy = BlockEntropy(lambda: ex.tip_hash)

    for name, cls in MODULE_CLASSES.items():
        mod = cls(
            address=module_address(cfg.chain_id, name),
            admin=cfg.admin,
            clock=clk,
            ledger=tok,
            oracle=poh,
            entropy=entropy,
            events=ex.events,
            params=cfg.modules.get(name),
            seconds_per_day=cfg.seconds_per_day,
            start_time=cfg.start_time,
        )
        ex.register(name, mod)

    for name, amount in sorted(cfg.initial_pools.items()):
        if int(amount) > 0:
            tok.mint(module_address(cfg.chain_id, name), int(amount))

    log_event(_log, "executor_booted", chain_id=cfg.chain_id, mode=cfg.mode, modules=sorted(ex.modules))
    return ex
