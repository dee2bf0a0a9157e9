# src/wormy/modules/pitstop.py
from __future__ import annotations

from typing import Any, Dict

from wormy.modules.rate_limited import RateLimitedModule
from wormy.runtime.admin_config import PitStopParams

Json = Dict[str, Any]


class PitStopModule(RateLimitedModule):
    """Verified humans make up to ``daily_cap`` pit stops a day, each paying ``reward_amount``."""

    MODULE = "pitstop"
    PARAMS = PitStopParams

    def pit_stop(self, caller: str, signature: bytes) -> Json:
        with self.call(caller) as ctx:
            res = self._gated_consume(ctx, signature)
            reward = int(self.params.reward_amount)
            totals = self.state.setdefault("totals", {})
            totals[ctx.caller] = int(totals.get(ctx.caller, 0)) + 1
            self._pay(ctx.caller, reward)
            ctx.emit(
                "pit_stop",
                identity=ctx.caller,
                count=res.new_count,
                total_pit_stops=totals[ctx.caller],
                reward=reward,
            )
        return {"day": res.day, "count": res.new_count, "reward": reward, "total_pit_stops": totals[ctx.caller]}

    def total_pit_stops(self, identity: str) -> int:
        return int(self.state.get("totals", {}).get(str(identity), 0))
