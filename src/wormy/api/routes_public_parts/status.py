from __future__ import annotations

import os
from typing import Any, Dict

from fastapi import APIRouter, Request

from wormy.api.routes_public_parts.common import _executor

router = APIRouter()

Json = Dict[str, Any]


@router.get("/health")
def health() -> Json:
    return {"ok": True}


@router.get("/status")
def status(request: Request) -> Json:
    """
    Public runtime status summary.

    Mounted under /v1 by routes_public.py:
      GET /v1/status
    """
    ex = _executor(request)
    now = ex.clock.now()

    modules: Json = {}
    for name, mod in sorted(ex.modules.items()):
        modules[name] = {
            "address": mod.address,
            "active": bool(mod.params.active),
            "day": mod.day_of(now),
            "seconds_until_next_day": mod.seconds_until_next_day(now),
            "pool_balance": mod.pool_balance(),
        }

    return {
        "ok": True,
        "chain_id": ex.chain_id,
        "height": int(ex.height),
        "tip_hash": str(ex.tip_hash),
        "now": int(now),
        "mode": (os.environ.get("WORMY_MODE") or getattr(ex.config, "mode", "prod") or "prod"),
        "modules": modules,
    }
