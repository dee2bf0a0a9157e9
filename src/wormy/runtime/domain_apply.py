# src/wormy/runtime/domain_apply.py
from __future__ import annotations

"""
Route a TxEnvelope to the module method that implements it.

apply_tx fails closed: an unknown tx_type, a missing module, or a payload
that does not match its schema is rejected before any module runs.
"""

from typing import Any, Callable, Dict, Mapping

from wormy.runtime.errors import WormyError
from wormy.runtime.module import WormyModule
from wormy.runtime.tx_schema import validate_payload
from wormy.runtime.tx_types import TxEnvelope

Json = Dict[str, Any]
Handler = Callable[[Mapping[str, WormyModule], TxEnvelope, Any], Json]


def _module(modules: Mapping[str, WormyModule], name: str) -> Any:
    mod = modules.get(name)
    if mod is None:
        raise WormyError("module_unavailable", "module_not_configured", {"module": name})
    return mod


def _pit_stop(modules, env, p) -> Json:
    return _module(modules, "pitstop").pit_stop(env.signer, p.poh_sig_bytes())


def _fuel_claim(modules, env, p) -> Json:
    return _module(modules, "fuel").claim_fuel(env.signer, p.poh_sig_bytes())


def _race_enter(modules, env, p) -> Json:
    return _module(modules, "race").race(env.signer, p.poh_sig_bytes())


def _faucet_claim(modules, env, p) -> Json:
    return _module(modules, "faucet").claim(env.signer, p.poh_sig_bytes())


def _game_check_in(modules, env, p) -> Json:
    return _module(modules, "game").check_in(env.signer, p.poh_sig_bytes())


def _game_vote(modules, env, p) -> Json:
    return _module(modules, "game").vote(env.signer, p.poh_sig_bytes(), p.option)


def _game_cheer(modules, env, p) -> Json:
    return _module(modules, "game").cheer(env.signer, p.poh_sig_bytes(), p.target)


def _game_predict(modules, env, p) -> Json:
    return _module(modules, "game").predict(env.signer, p.poh_sig_bytes(), p.value)


def _vesting_create(modules, env, p) -> Json:
    return _module(modules, "vesting").create_schedule(env.signer, p.beneficiary, p.start_time, p.duration, p.total_amount)


def _vesting_release(modules, env, p) -> Json:
    return _module(modules, "vesting").release(env.signer, p.beneficiary)


def _vesting_revoke(modules, env, p) -> Json:
    return _module(modules, "vesting").revoke(env.signer, p.beneficiary)


def _config_set(modules, env, p) -> Json:
    return _module(modules, p.module).set_config(env.signer, dict(p.changes))


def _admin_transfer(modules, env, p) -> Json:
    return _module(modules, p.module).transfer_admin(env.signer, p.new_admin)


ROUTES: Dict[str, Handler] = {
    "PIT_STOP": _pit_stop,
    "FUEL_CLAIM": _fuel_claim,
    "RACE_ENTER": _race_enter,
    "FAUCET_CLAIM": _faucet_claim,
    "GAME_CHECK_IN": _game_check_in,
    "GAME_VOTE": _game_vote,
    "GAME_CHEER": _game_cheer,
    "GAME_PREDICT": _game_predict,
    "VESTING_CREATE": _vesting_create,
    "VESTING_RELEASE": _vesting_release,
    "VESTING_REVOKE": _vesting_revoke,
    "CONFIG_SET": _config_set,
    "ADMIN_TRANSFER": _admin_transfer,
}

SUPPORTED_TX_TYPES = frozenset(ROUTES)


def apply_tx(modules: Mapping[str, WormyModule], env: TxEnvelope) -> Json:
    t = str(env.tx_type or "").strip().upper()
    handler = ROUTES.get(t)
    if handler is None:
        raise WormyError("tx_unimplemented", "tx_type_not_implemented", {"tx_type": t})
    if not env.signer:
        raise WormyError("invalid_tx", "missing_signer", {"tx_type": t})

    payload = validate_payload(t, env.payload)
    result = handler(modules, env, payload)
    return {"applied": t, "result": result}
