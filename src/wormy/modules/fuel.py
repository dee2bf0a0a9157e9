# src/wormy/modules/fuel.py
from __future__ import annotations

from typing import Any, Dict

from wormy.modules.rate_limited import RateLimitedModule
from wormy.runtime.admin_config import FuelParams

Json = Dict[str, Any]


class FuelModule(RateLimitedModule):
    MODULE = "fuel"
    PARAMS = FuelParams

    def claim_fuel(self, caller: str, signature: bytes) -> Json:
        with self.call(caller) as ctx:
            res = self._gated_consume(ctx, signature)
            amount = int(self.params.fuel_amount)
            claimed = self.state.setdefault("claimed", {})
            claimed[ctx.caller] = int(claimed.get(ctx.caller, 0)) + amount
            self._pay(ctx.caller, amount)
            ctx.emit("fuel_claimed", identity=ctx.caller, count=res.new_count, reward=amount, total_claimed=claimed[ctx.caller])
        return {"day": res.day, "count": res.new_count, "reward": amount, "total_claimed": claimed[ctx.caller]}

    def total_claimed(self, identity: str) -> int:
        return int(self.state.get("claimed", {}).get(str(identity), 0))
