# src/wormy/modules/rate_limited.py
from __future__ import annotations

from typing import Any, Dict

from wormy.runtime.admin_config import RateLimitedParams
from wormy.runtime.day_bucket import ConsumeResult, DayBucketCounter, _as_int
from wormy.runtime.module import CallContext, WormyModule

Json = Dict[str, Any]


class RateLimitedModule(WormyModule):
    """Module whose main action is capped per identity per day.

    State layout:
      state["usage"][identity]              -> {"day", "count"} (lazy reset)
      state["history"][identity][str(day)]  -> count consumed on that day
    """

    MODULE = "rate_limited"
    PARAMS = RateLimitedParams

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.counter = DayBucketCounter(
            self.state,
            "usage",
            seconds_per_day=self.seconds_per_day,
            start_time=self.start_time,
        )

    def _consume(self, ctx: CallContext) -> ConsumeResult:
        res = self.counter.try_consume(ctx.caller, ctx.now, self.params.daily_cap)
        history = self.state.setdefault("history", {})
        per_identity = history.setdefault(ctx.caller, {})
        per_identity[str(res.day)] = res.new_count
        return res

    def _gated_consume(self, ctx: CallContext, signature: bytes) -> ConsumeResult:
        self._require_active()
        self._verify_identity(ctx, signature)
        return self._consume(ctx)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status(self, identity: str) -> Json:
        now = self.clock.now()
        cap = int(self.params.daily_cap)
        count = self.counter.count_for(identity, now)
        return {
            "module": self.MODULE,
            "identity": str(identity),
            "day": self.day_of(now),
            "count": count,
            "daily_cap": cap,
            "remaining": max(0, cap - count),
            "can_act": bool(self.params.active) and count < cap,
            "seconds_until_next_day": self.seconds_until_next_day(now),
        }

    def status_for_day(self, identity: str, day: int) -> Json:
        per_identity = self.state.get("history", {}).get(str(identity), {})
        count = _as_int(per_identity.get(str(int(day))), 0) if isinstance(per_identity, dict) else 0
        return {"module": self.MODULE, "identity": str(identity), "day": int(day), "count": count}
