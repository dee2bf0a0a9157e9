# src/wormy/modules/faucet.py
from __future__ import annotations

"""
Randomized daily token faucet.

The payout is drawn from [min_amount, max_amount] with the weak on-chain
draw in wormy.runtime.random_draw. Callers can predict and, with control
over ordering or timestamps, steer their amount. Keep the range small.
"""

from typing import Any, Dict

from wormy.modules.rate_limited import RateLimitedModule
from wormy.runtime.admin_config import FaucetParams
from wormy.runtime.random_draw import SeedMaterial, draw

Json = Dict[str, Any]


class FaucetModule(RateLimitedModule):
    MODULE = "faucet"
    PARAMS = FaucetParams

    def claim(self, caller: str, signature: bytes) -> Json:
        with self.call(caller) as ctx:
            res = self._gated_consume(ctx, signature)
            seed = SeedMaterial(block_timestamp=ctx.now, difficulty=ctx.difficulty, contract_address=self.address)
            amount = draw(ctx.caller, seed, self.params.min_amount, self.params.max_amount)

            dispensed = self.state.setdefault("dispensed", {})
            dispensed[ctx.caller] = int(dispensed.get(ctx.caller, 0)) + amount
            self.state["total_dispensed"] = int(self.state.get("total_dispensed", 0)) + amount

            self._pay(ctx.caller, amount)
            ctx.emit("faucet_claimed", identity=ctx.caller, count=res.new_count, reward=amount)
        return {"day": res.day, "count": res.new_count, "reward": amount}

    def total_dispensed(self) -> int:
        return int(self.state.get("total_dispensed", 0))

    def dispensed_to(self, identity: str) -> int:
        return int(self.state.get("dispensed", {}).get(str(identity), 0))
