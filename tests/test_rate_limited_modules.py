from __future__ import annotations

import pytest

from wormy.modules.faucet import FaucetModule
from wormy.modules.fuel import FuelModule
from wormy.modules.pitstop import PitStopModule
from wormy.modules.race import RaceModule
from wormy.runtime.entropy import StaticEntropy
from wormy.runtime.errors import IdentityVerificationFailed, InvalidConfiguration, RateLimitExceeded
from wormy.testing.sigtools import attest

ADMIN = "wormy-admin"
DAY = 86_400


def test_pit_stop_cap_and_rewards(make_module, clock, ledger) -> None:
    mod = make_module(PitStopModule, pool=1_000)
    sig = attest("alice")

    for i in range(1, 4):
        out = mod.pit_stop("alice", sig)
        assert out["count"] == i
        assert out["reward"] == 10

    with pytest.raises(RateLimitExceeded):
        mod.pit_stop("alice", sig)

    assert ledger.balance_of("alice") == 30
    assert mod.total_pit_stops("alice") == 3

    st = mod.status("alice")
    assert st["count"] == 3
    assert st["remaining"] == 0
    assert st["can_act"] is False
    assert st["seconds_until_next_day"] == DAY - 100


def test_pit_stop_next_day_allows_again(make_module, clock) -> None:
    mod = make_module(PitStopModule, pool=1_000, params={"daily_cap": 1})
    sig = attest("alice")
    today = mod.today()

    mod.pit_stop("alice", sig)
    with pytest.raises(RateLimitExceeded):
        mod.pit_stop("alice", sig)

    clock.advance(mod.seconds_until_next_day())
    out = mod.pit_stop("alice", sig)
    assert out["day"] == today + 1
    assert out["count"] == 1
    assert mod.total_pit_stops("alice") == 2

    assert mod.status_for_day("alice", today)["count"] == 1
    assert mod.status_for_day("alice", today + 1)["count"] == 1
    assert mod.status_for_day("alice", today - 1)["count"] == 0


def test_pit_stop_events_carry_counts(make_module) -> None:
    mod = make_module(PitStopModule, pool=1_000)
    mod.pit_stop("alice", attest("alice"))

    ev = mod.events.events(module="pitstop", identity="alice")
    assert len(ev) == 1
    e = ev[0]
    assert e["event"] == "pit_stop"
    assert e["count"] == 1
    assert e["reward"] == 10
    assert e["day"] == mod.today()
    assert e["seq"] == 1


def test_poh_required(make_module) -> None:
    mod = make_module(PitStopModule, pool=1_000, oracle=None)
    with pytest.raises(IdentityVerificationFailed) as e:
        mod.pit_stop("alice", attest("alice"))
    assert e.value.reason == "no_identity_oracle"


def test_invalid_initial_cap_rejected(make_module) -> None:
    with pytest.raises(InvalidConfiguration):
        make_module(PitStopModule, params={"daily_cap": 0})


def test_fuel_claim(make_module, ledger) -> None:
    mod = make_module(FuelModule, pool=100)
    out = mod.claim_fuel("alice", attest("alice"))
    assert out["reward"] == 25
    assert out["total_claimed"] == 25
    assert ledger.balance_of("alice") == 25

    with pytest.raises(RateLimitExceeded):
        mod.claim_fuel("alice", attest("alice"))

    assert mod.claim_fuel("bob", attest("bob"))["count"] == 1
    assert mod.total_claimed("bob") == 25


def test_race_points_per_season(make_module, ledger, clock) -> None:
    mod = make_module(RaceModule, params={"daily_cap": 2, "points_per_race": 3})

    mod.race("alice", attest("alice"))
    out = mod.race("alice", attest("alice"))
    assert out["season"] == 1
    assert out["season_points"] == 6
    assert out["lifetime_points"] == 6
    with pytest.raises(RateLimitExceeded):
        mod.race("alice", attest("alice"))

    mod.set_season(ADMIN, 2)
    assert mod.season == 2

    clock.advance(DAY)
    out = mod.race("alice", attest("alice"))
    assert out["season_points"] == 3
    assert out["lifetime_points"] == 9
    assert mod.season_points("alice", 1) == 6
    assert mod.season_points("alice") == 3

    # Races score points only.
    assert ledger.balance_of("alice") == 0


def test_race_leaderboard(make_module) -> None:
    mod = make_module(RaceModule)
    for who, n in (("alice", 1), ("bob", 3), ("carol", 2), ("dave", 3)):
        for _ in range(n):
            mod.race(who, attest(who))

    rows = mod.leaderboard(limit=3)
    assert rows == [
        {"identity": "bob", "points": 3},
        {"identity": "dave", "points": 3},
        {"identity": "carol", "points": 2},
    ]
    assert mod.leaderboard(season=7) == []


def test_faucet_amount_within_range(make_module, ledger) -> None:
    mod = make_module(FaucetModule, pool=10_000, params={"min_amount": 5, "max_amount": 9}, entropy=StaticEntropy(77))

    total = 0
    for i in range(20):
        who = f"user-{i}"
        out = mod.claim(who, attest(who))
        assert 5 <= out["reward"] <= 9
        assert ledger.balance_of(who) == out["reward"]
        assert mod.dispensed_to(who) == out["reward"]
        total += out["reward"]

    assert mod.total_dispensed() == total
    assert mod.pool_balance() == 10_000 - total


def test_faucet_fixed_amount_and_daily_cap(make_module, ledger) -> None:
    mod = make_module(FaucetModule, pool=100, params={"min_amount": 7, "max_amount": 7})

    assert mod.claim("alice", attest("alice"))["reward"] == 7
    with pytest.raises(RateLimitExceeded):
        mod.claim("alice", attest("alice"))
    assert ledger.balance_of("alice") == 7


def test_faucet_is_deterministic_given_same_chain_state(make_module, ledger) -> None:
    from wormy.ledger.token import InMemoryTokenLedger

    a = make_module(FaucetModule, pool=1_000, address="chain:faucet", entropy=StaticEntropy(5))
    b = make_module(FaucetModule, pool=1_000, address="chain:faucet", ledger=InMemoryTokenLedger(), entropy=StaticEntropy(5))

    assert a.claim("alice", attest("alice"))["reward"] == b.claim("alice", attest("alice"))["reward"]
