# src/wormy/modules/race.py
from __future__ import annotations

from typing import Any, Dict

from wormy.modules.rate_limited import RateLimitedModule
from wormy.runtime.admin_config import RaceParams

Json = Dict[str, Any]


class RaceModule(RateLimitedModule):
    """Daily-capped races scoring points per season.

    State layout (on top of RateLimitedModule):
      state["season_points"][str(season)][identity] -> points in that season
      state["lifetime_points"][identity]            -> points across all seasons

    The season is an administrator-set integer. Moving it backwards is
    allowed; points simply accumulate into whichever season is current.
    """

    MODULE = "race"
    PARAMS = RaceParams

    def race(self, caller: str, signature: bytes) -> Json:
        with self.call(caller) as ctx:
            res = self._gated_consume(ctx, signature)
            season = int(self.params.season)
            points = int(self.params.points_per_race)

            by_season = self.state.setdefault("season_points", {}).setdefault(str(season), {})
            by_season[ctx.caller] = int(by_season.get(ctx.caller, 0)) + points
            lifetime = self.state.setdefault("lifetime_points", {})
            lifetime[ctx.caller] = int(lifetime.get(ctx.caller, 0)) + points

            out = {
                "day": res.day,
                "count": res.new_count,
                "season": season,
                "points": points,
                "season_points": by_season[ctx.caller],
                "lifetime_points": lifetime[ctx.caller],
            }
            ctx.emit("race_finished", identity=ctx.caller, **{k: v for k, v in out.items() if k != "day"})
        return out

    def set_season(self, caller: str, season: int) -> Json:
        return self.set_config(caller, {"season": season})

    @property
    def season(self) -> int:
        return int(self.params.season)

    def season_points(self, identity: str, season: int | None = None) -> int:
        s = self.season if season is None else int(season)
        return int(self.state.get("season_points", {}).get(str(s), {}).get(str(identity), 0))

    def lifetime_points(self, identity: str) -> int:
        return int(self.state.get("lifetime_points", {}).get(str(identity), 0))

    def leaderboard(self, season: int | None = None, *, limit: int = 10) -> list:
        s = self.season if season is None else int(season)
        rows = self.state.get("season_points", {}).get(str(s), {})
        ranked = sorted(rows.items(), key=lambda kv: (-int(kv[1]), kv[0]))
        return [{"identity": k, "points": int(v)} for k, v in ranked[: max(0, int(limit))]]
