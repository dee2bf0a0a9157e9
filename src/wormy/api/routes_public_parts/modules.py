from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from wormy.api.errors import ApiError
from wormy.api.routes_public_parts.common import _module, _query

router = APIRouter()

Json = Dict[str, Any]


@router.get("/modules/{name}/config")
def module_config(name: str, request: Request) -> Json:
    mod = _module(request, name)
    return {"ok": True, "config": mod.config_view()}


@router.get("/modules/{name}/status/{identity}")
def module_status_today(name: str, identity: str, request: Request) -> Json:
    """Today's usage for ``identity``: count, remaining, seconds until the next day."""
    mod = _module(request, name)
    fn = getattr(mod, "status", None)
    if not callable(fn):
        raise ApiError.not_found("unsupported_query", f"module {name!r} has no daily status", {"module": name})
    return {"ok": True, "status": _query(fn, identity)}


@router.get("/modules/{name}/day/{day}/{identity}")
def module_status_for_day(name: str, day: int, identity: str, request: Request) -> Json:
    mod = _module(request, name)
    fn = getattr(mod, "status_for_day", None)
    if not callable(fn):
        raise ApiError.not_found("unsupported_query", f"module {name!r} has no daily status", {"module": name})
    return {"ok": True, "status": _query(fn, identity, day)}


@router.get("/modules/{name}/next-day")
def module_next_day(name: str, request: Request) -> Json:
    mod = _module(request, name)
    now = mod.clock.now()
    return {
        "ok": True,
        "module": name,
        "day": mod.day_of(now),
        "seconds_until_next_day": mod.seconds_until_next_day(now),
    }
