from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from wormy.api.app import create_app
from wormy.ledger.token import InMemoryTokenLedger
from wormy.runtime.chain_config import chain_config_from_dict
from wormy.runtime.clock import ManualClock
from wormy.runtime.executor_boot import build_executor
from wormy.testing.sigtools import attest, poh_test_authority

ADMIN = "wormy-admin"
T0 = 10 * 86_400 + 100


@pytest.fixture
def ex():
    cfg = chain_config_from_dict(
        {
            "chain_id": "wormy-api",
            "mode": "dev",
            "admin": ADMIN,
            "initial_pools": {"pitstop": 1_000, "vesting": 1_000},
        }
    )
    oracle, _priv = poh_test_authority()
    return build_executor(cfg, clock=ManualClock(T0), ledger=InMemoryTokenLedger(), oracle=oracle)


@pytest.fixture
def client(ex):
    app = create_app(boot_runtime=False, executor=ex)
    with TestClient(app) as c:
        yield c


def _poh(identity: str) -> dict:
    return {"poh_sig": attest(identity).hex()}


def test_health_and_status(client, ex) -> None:
    assert client.get("/v1/health").json() == {"ok": True}

    r = client.get("/v1/status")
    assert r.status_code == 200
    body = r.json()
    assert body["chain_id"] == "wormy-api"
    assert body["height"] == 0
    assert body["now"] == T0
    assert body["modules"]["pitstop"]["pool_balance"] == 1_000
    assert body["modules"]["pitstop"]["day"] == 10
    assert body["modules"]["game"]["seconds_until_next_day"] == 86_400 - 100
    assert r.headers.get("x-request-id")


def test_module_status_after_tx(client, ex) -> None:
    ex.submit({"tx_type": "PIT_STOP", "signer": "alice", "nonce": 1, "payload": _poh("alice")})

    st = client.get("/v1/modules/pitstop/status/alice").json()["status"]
    assert st["count"] == 1
    assert st["remaining"] == 2
    assert st["can_act"] is True

    day = client.get("/v1/modules/pitstop/day/10/alice").json()["status"]
    assert day["count"] == 1
    assert client.get("/v1/modules/pitstop/day/9/alice").json()["status"]["count"] == 0

    nd = client.get("/v1/modules/pitstop/next-day").json()
    assert nd["day"] == 10
    assert nd["seconds_until_next_day"] == 86_400 - 100

    cfg = client.get("/v1/modules/pitstop/config").json()["config"]
    assert cfg["daily_cap"] == 3
    assert cfg["admin"] == ADMIN
    assert cfg["address"] == "wormy-api:pitstop"


def test_unknown_module_and_unsupported_query(client) -> None:
    r = client.get("/v1/modules/casino/config")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "unknown_module"

    r = client.get("/v1/modules/vesting/status/bob")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "unsupported_query"


def test_game_routes(client, ex) -> None:
    ex.submit({"tx_type": "GAME_CHECK_IN", "signer": "alice", "nonce": 1, "payload": _poh("alice")})
    ex.submit({"tx_type": "GAME_VOTE", "signer": "alice", "nonce": 2, "payload": {**_poh("alice"), "option": 3}})

    streak = client.get("/v1/game/streak/alice").json()["streak"]
    assert streak["current"] == 1
    assert streak["max"] == 1

    day = client.get("/v1/modules/game/day/10/alice").json()["status"]
    assert day["checked_in"] is True
    assert day["votes"] == [3]

    votes = client.get("/v1/game/votes").json()
    assert votes["day"] == 10
    assert votes["tally"] == {"3": 1}

    st = client.get("/v1/modules/game/status/alice").json()["status"]
    assert st["remaining"]["check_in"] == 0
    assert st["points"] == 15


def test_race_routes(client, ex) -> None:
    ex.submit({"tx_type": "RACE_ENTER", "signer": "alice", "nonce": 1, "payload": _poh("alice")})

    r = client.get("/v1/race/points/alice").json()
    assert (r["season"], r["season_points"], r["lifetime_points"]) == (1, 1, 1)
    assert client.get("/v1/race/points/alice?season=2").json()["season_points"] == 0

    board = client.get("/v1/race/leaderboard").json()["rows"]
    assert board == [{"identity": "alice", "points": 1}]


def test_vesting_route(client, ex) -> None:
    r = client.get("/v1/vesting/bob")
    assert r.status_code == 404
    assert r.json() == {"ok": False, "error": {"code": "not_found", "message": "schedule_not_found", "details": {"beneficiary": "bob"}}}

    ex.submit(
        {
            "tx_type": "VESTING_CREATE",
            "signer": ADMIN,
            "nonce": 1,
            "payload": {"beneficiary": "bob", "start_time": T0 + 10, "duration": 100, "total_amount": 1_000},
        }
    )
    sch = client.get("/v1/vesting/bob").json()["schedule"]
    assert sch["state"] == "active"
    assert sch["total_amount"] == 1_000
    assert sch["end_time"] == T0 + 110


def test_events_route(client, ex) -> None:
    ex.submit({"tx_type": "PIT_STOP", "signer": "alice", "nonce": 1, "payload": _poh("alice")})
    ex.submit({"tx_type": "PIT_STOP", "signer": "bob", "nonce": 1, "payload": _poh("bob")})

    evs = client.get("/v1/events?module=pitstop&identity=bob").json()["events"]
    assert len(evs) == 1
    assert evs[0]["event"] == "pit_stop"
    assert evs[0]["identity"] == "bob"

    assert len(client.get("/v1/events?limit=1").json()["events"]) == 1


def test_metrics_disabled_by_default(client, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WORMY_METRICS_ENABLED", raising=False)
    assert client.get("/v1/metrics").status_code == 404


def test_metrics_enabled(client, ex, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORMY_METRICS_ENABLED", "1")
    ex.submit({"tx_type": "PIT_STOP", "signer": "alice", "nonce": 1, "payload": _poh("alice")})

    r = client.get("/v1/metrics")
    assert r.status_code == 200
    assert 'wormy_tx_receipts{outcome="applied"} 1' in r.text
    assert 'wormy_module_events{event="pit_stop",module="pitstop"} 1' in r.text
    assert "wormy_height 1" in r.text


def test_not_ready_without_executor() -> None:
    app = create_app(boot_runtime=False)
    with TestClient(app) as c:
        r = c.get("/v1/status")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "not_ready"


def test_boot_runtime_uses_build_executor(monkeypatch: pytest.MonkeyPatch) -> None:
    from wormy.api import app as api_app

    monkeypatch.setattr(api_app, "build_executor", lambda: SimpleNamespace(chain_id="stub"))
    app = api_app.create_app(boot_runtime=True)
    assert app.state.executor.chain_id == "stub"


def test_docs_hidden_in_prod(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORMY_MODE", "prod")
    with TestClient(create_app(boot_runtime=False)) as c:
        assert c.get("/docs").status_code == 404

    monkeypatch.setenv("WORMY_MODE", "dev")
    with TestClient(create_app(boot_runtime=False)) as c:
        assert c.get("/docs").status_code == 200


def test_requests_counted_by_route_template(client) -> None:
    from wormy.runtime.metrics import counter_value

    client.get("/v1/health")
    client.get("/v1/game/streak/alice")
    client.get("/v1/game/streak/bob")

    assert counter_value("http_requests", route="/v1/health", status=200) == 1
    assert counter_value("http_requests", route="/v1/game/streak/{identity}", status=200) == 2
