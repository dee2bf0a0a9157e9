from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request

from wormy.api.routes_public_parts.common import _int_param, _module, _query

router = APIRouter()

Json = Dict[str, Any]


@router.get("/game/streak/{identity}")
def game_streak(identity: str, request: Request) -> Json:
    game = _module(request, "game")
    return {"ok": True, "identity": identity, "streak": _query(game.streak, identity)}


@router.get("/game/votes")
def game_votes(request: Request, day: Optional[str] = None) -> Json:
    game = _module(request, "game")
    d = _int_param(day, game.today())
    tally = _query(game.vote_tally, d)
    return {"ok": True, "day": d, "tally": {str(k): v for k, v in sorted(tally.items())}}


@router.get("/race/points/{identity}")
def race_points(identity: str, request: Request, season: Optional[str] = None) -> Json:
    race = _module(request, "race")
    s = _int_param(season, race.season)
    return {
        "ok": True,
        "identity": identity,
        "season": s,
        "season_points": race.season_points(identity, s),
        "lifetime_points": race.lifetime_points(identity),
    }


@router.get("/race/leaderboard")
def race_leaderboard(request: Request, season: Optional[str] = None, limit: Optional[str] = None) -> Json:
    race = _module(request, "race")
    s = _int_param(season, race.season)
    return {"ok": True, "season": s, "rows": race.leaderboard(s, limit=_int_param(limit, 10))}


@router.get("/vesting/{beneficiary}")
def vesting_schedule(beneficiary: str, request: Request) -> Json:
    vesting = _module(request, "vesting")
    return {"ok": True, "schedule": _query(vesting.view, beneficiary)}
