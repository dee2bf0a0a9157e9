from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "wormy" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)


ADMIN = "wormy-admin"

# Day 10, 100 seconds in (start_time=0, 86400 s/day).
T0 = 10 * 86_400 + 100


@pytest.fixture(autouse=True)
def _reset_metrics():
    from wormy.runtime.metrics import reset_for_tests

    reset_for_tests()
    yield
    reset_for_tests()


@pytest.fixture
def clock():
    from wormy.runtime.clock import ManualClock

    return ManualClock(T0)


@pytest.fixture
def ledger():
    from wormy.ledger.token import InMemoryTokenLedger

    return InMemoryTokenLedger()


@pytest.fixture
def poh():
    from wormy.testing.sigtools import poh_test_authority

    oracle, _priv = poh_test_authority()
    return oracle


@pytest.fixture
def make_module(clock, ledger, poh):
    """Factory: build a module wired to the shared clock/ledger/oracle, optionally funding its pool."""

    def _make(cls, *, pool: int = 0, params=None, address=None, **kwargs):
        addr = address or f"wormy-test:{cls.MODULE}"
        tok = kwargs.pop("ledger", ledger)
        mod = cls(
            address=addr,
            admin=ADMIN,
            clock=kwargs.pop("clock", clock),
            ledger=tok,
            oracle=kwargs.pop("oracle", poh),
            params=params,
            **kwargs,
        )
        if pool > 0:
            tok.mint(addr, pool)
        return mod

    return _make
