from __future__ import annotations

import pytest

from wormy.modules.faucet import FaucetModule
from wormy.modules.pitstop import PitStopModule
from wormy.runtime.admin_config import (
    AdministrativeConfig,
    FaucetParams,
    PitStopParams,
    build_params,
)
from wormy.runtime.errors import InvalidConfiguration, ModuleInactive, Unauthorized
from wormy.testing.sigtools import attest

ADMIN = "wormy-admin"


def _cfg() -> AdministrativeConfig:
    return AdministrativeConfig(admin=ADMIN, params=PitStopParams())


def test_defaults_and_snapshot() -> None:
    cfg = _cfg()
    snap = cfg.snapshot()
    assert snap["admin"] == ADMIN
    assert snap["daily_cap"] == 3
    assert snap["reward_amount"] == 10
    assert snap["active"] is True
    assert cfg.get("daily_cap") == 3


def test_update_requires_admin() -> None:
    cfg = _cfg()
    with pytest.raises(Unauthorized):
        cfg.update("mallory", dict(daily_cap=5))
    assert cfg.params.daily_cap == 3


def test_update_returns_before_and_after() -> None:
    cfg = _cfg()
    change = cfg.update(ADMIN, dict(daily_cap=5, reward_amount=20))
    assert change == {
        "before": {"daily_cap": 3, "reward_amount": 10},
        "after": {"daily_cap": 5, "reward_amount": 20},
    }
    assert cfg.params.daily_cap == 5


@pytest.mark.parametrize(
    "changes",
    [
        {"daily_cap": 0},
        {"daily_cap": 256},
        {"daily_cap": "4"},
        {"reward_amount": 0},
        {"reward_amount": -3},
        {"nope": 1},
        {},
    ],
)
def test_invalid_updates_leave_params_unchanged(changes) -> None:
    cfg = _cfg()
    before = cfg.snapshot()
    with pytest.raises(InvalidConfiguration):
        cfg.update(ADMIN, changes)
    assert cfg.snapshot() == before


def test_cross_field_validation_on_faucet_range() -> None:
    cfg = AdministrativeConfig(admin=ADMIN, params=FaucetParams(min_amount=5, max_amount=10))
    with pytest.raises(InvalidConfiguration):
        cfg.update(ADMIN, dict(min_amount=11))
    # Moving both together is fine.
    cfg.update(ADMIN, dict(min_amount=20, max_amount=30))
    assert (cfg.params.min_amount, cfg.params.max_amount) == (20, 30)


def test_build_params_rejects_bad_initial_config() -> None:
    with pytest.raises(InvalidConfiguration) as e:
        build_params(PitStopParams, {"daily_cap": 0})
    assert e.value.reason == "params_validation_failed"

    assert build_params(PitStopParams, None) == PitStopParams()


def test_transfer_admin_moves_capability() -> None:
    cfg = _cfg()
    change = cfg.transfer_admin(ADMIN, "new-admin")
    assert change == {"before": {"admin": ADMIN}, "after": {"admin": "new-admin"}}

    with pytest.raises(Unauthorized):
        cfg.set(ADMIN, "daily_cap", 2)
    cfg.set("new-admin", "daily_cap", 2)
    assert cfg.params.daily_cap == 2


def test_checkpoint_restore() -> None:
    cfg = _cfg()
    cp = cfg.checkpoint()
    cfg.update(ADMIN, dict(daily_cap=9))
    cfg.transfer_admin(ADMIN, "other")
    cfg.restore(cp)
    assert cfg.admin == ADMIN
    assert cfg.params.daily_cap == 3


def test_module_set_config_emits_config_updated(make_module) -> None:
    mod = make_module(PitStopModule, pool=1_000)

    change = mod.set_config(ADMIN, dict(daily_cap=1))
    assert change["after"] == {"daily_cap": 1}

    ev = mod.events.events(module="pitstop")
    assert ev[-1]["event"] == "config_updated"
    assert ev[-1]["before"] == {"daily_cap": 3}
    assert ev[-1]["after"] == {"daily_cap": 1}
    assert ev[-1]["identity"] == ADMIN


def test_module_rejected_config_emits_nothing(make_module) -> None:
    mod = make_module(FaucetModule, pool=1_000)

    with pytest.raises(Unauthorized):
        mod.set_config("mallory", dict(max_amount=5))
    with pytest.raises(InvalidConfiguration):
        mod.set_config(ADMIN, dict(max_amount=0))

    assert mod.events.events(module="faucet") == []
    assert mod.params.max_amount == 100


def test_deactivated_module_rejects_actions(make_module) -> None:
    mod = make_module(PitStopModule, pool=1_000)
    mod.set_config(ADMIN, dict(active=False))

    with pytest.raises(ModuleInactive):
        mod.pit_stop("alice", attest("alice"))
    assert mod.status("alice")["count"] == 0
    assert mod.status("alice")["can_act"] is False

    mod.set_config(ADMIN, dict(active=True))
    assert mod.pit_stop("alice", attest("alice"))["count"] == 1


def test_module_admin_transfer(make_module) -> None:
    mod = make_module(PitStopModule)
    mod.transfer_admin(ADMIN, "ops")
    assert mod.config_view()["admin"] == "ops"
    with pytest.raises(Unauthorized):
        mod.set_config(ADMIN, dict(daily_cap=2))
