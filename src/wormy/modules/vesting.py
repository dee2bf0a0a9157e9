# src/wormy/modules/vesting.py
from __future__ import annotations

"""
Linear token vesting, one schedule per beneficiary.

    vested(now) = total * min(max(0, now - start), duration) // duration

Elapsed time is clamped to the duration before the multiply, so the vested
amount never exceeds the total and the intermediate product stays bounded
by total * duration.

Lifecycle: absent -> active (claimed grows via release) -> revoked.
Revoked is terminal: the unclaimed remainder goes to the administrator and
no further release succeeds. Schedules are never deleted or overwritten.

The module pool must hold every outstanding obligation; create_schedule
refuses a schedule the pool cannot cover.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from wormy.runtime.admin_config import VestingParams
from wormy.runtime.errors import (
    InsufficientLedgerBalance,
    InvalidConfiguration,
    NothingToRelease,
    ScheduleAlreadyExists,
    ScheduleNotFound,
    ScheduleRevoked,
)
from wormy.runtime.module import WormyModule

Json = Dict[str, Any]


@dataclass(frozen=True)
class VestingSchedule:
    beneficiary: str
    start_time: int
    duration: int
    total_amount: int
    claimed_amount: int = 0
    revoked: bool = False

    @staticmethod
    def from_json(j: Json) -> "VestingSchedule":
        return VestingSchedule(
            beneficiary=str(j.get("beneficiary", "")),
            start_time=int(j.get("start_time", 0)),
            duration=int(j.get("duration", 0)),
            total_amount=int(j.get("total_amount", 0)),
            claimed_amount=int(j.get("claimed_amount", 0)),
            revoked=bool(j.get("revoked", False)),
        )

    def to_json(self) -> Json:
        return {
            "beneficiary": self.beneficiary,
            "start_time": self.start_time,
            "duration": self.duration,
            "total_amount": self.total_amount,
            "claimed_amount": self.claimed_amount,
            "revoked": self.revoked,
        }


def vested_amount(schedule: VestingSchedule, now: int) -> int:
    if schedule.revoked:
        return int(schedule.claimed_amount)
    elapsed = max(0, int(now) - int(schedule.start_time))
    elapsed = min(elapsed, int(schedule.duration))
    return int(schedule.total_amount) * elapsed // int(schedule.duration)


def _positive_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise InvalidConfiguration(reason=f"{name}_must_be_positive", details={name: v})
    return v


class LinearVestingLedger(WormyModule):
    MODULE = "vesting"
    PARAMS = VestingParams

    def _schedules(self) -> Json:
        cur = self.state.get("schedules")
        if not isinstance(cur, dict):
            cur = {}
            self.state["schedules"] = cur
        return cur

    def schedule(self, beneficiary: str) -> Optional[VestingSchedule]:
        raw = self.state.get("schedules", {}).get(str(beneficiary))
        return VestingSchedule.from_json(raw) if isinstance(raw, dict) else None

    def _require_schedule(self, beneficiary: str) -> VestingSchedule:
        sch = self.schedule(beneficiary)
        if sch is None:
            raise ScheduleNotFound(details={"beneficiary": str(beneficiary)})
        return sch

    def schedules(self) -> List[VestingSchedule]:
        return [VestingSchedule.from_json(v) for _, v in sorted(self.state.get("schedules", {}).items())]

    def outstanding(self) -> int:
        """Tokens the pool still owes across all non-revoked schedules."""
        return sum(s.total_amount - s.claimed_amount for s in self.schedules() if not s.revoked)

    def vested(self, beneficiary: str, now: Optional[int] = None) -> int:
        sch = self._require_schedule(beneficiary)
        return vested_amount(sch, self.clock.now() if now is None else int(now))

    def releasable(self, beneficiary: str, now: Optional[int] = None) -> int:
        sch = self._require_schedule(beneficiary)
        if sch.revoked:
            return 0
        return max(0, self.vested(beneficiary, now) - sch.claimed_amount)

    def view(self, beneficiary: str) -> Json:
        sch = self._require_schedule(beneficiary)
        now = self.clock.now()
        out = sch.to_json()
        out.update(
            {
                "state": "revoked" if sch.revoked else "active",
                "vested_amount": vested_amount(sch, now),
                "releasable": self.releasable(beneficiary, now),
                "end_time": sch.start_time + sch.duration,
            }
        )
        return out

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_schedule(self, caller: str, beneficiary: str, start_time: int, duration: int, total_amount: int) -> Json:
        with self.call(caller) as ctx:
            self.config.require_admin(ctx.caller)
            self._require_active()

            who = str(beneficiary or "").strip()
            if not who:
                raise InvalidConfiguration(reason="missing_beneficiary")
            if who in self._schedules():
                raise ScheduleAlreadyExists(details={"beneficiary": who})
            if isinstance(start_time, bool) or not isinstance(start_time, int) or start_time <= ctx.now:
                raise InvalidConfiguration(reason="start_time_must_be_in_future", details={"start_time": start_time, "now": ctx.now})
            _positive_int("duration", duration)
            _positive_int("total_amount", total_amount)

            needed = self.outstanding() + int(total_amount)
            balance = self.pool_balance()
            if balance < needed:
                raise InsufficientLedgerBalance(details={"module": self.MODULE, "balance": balance, "required": needed})

            sch = VestingSchedule(beneficiary=who, start_time=start_time, duration=duration, total_amount=total_amount)
            self._schedules()[who] = sch.to_json()
            ctx.emit("schedule_created", identity=who, start_time=start_time, duration=duration, total_amount=total_amount)
        return sch.to_json()

    def release(self, caller: str, beneficiary: str) -> Json:
        with self.call(caller) as ctx:
            sch = self._require_schedule(beneficiary)
            if sch.revoked:
                raise ScheduleRevoked(details={"beneficiary": sch.beneficiary})
            amount = vested_amount(sch, ctx.now) - sch.claimed_amount
            if amount <= 0:
                raise NothingToRelease(details={"beneficiary": sch.beneficiary, "claimed_amount": sch.claimed_amount})

            claimed = sch.claimed_amount + amount
            self._schedules()[sch.beneficiary]["claimed_amount"] = claimed
            self._pay(sch.beneficiary, amount)
            ctx.emit("tokens_released", identity=sch.beneficiary, reward=amount, claimed_amount=claimed, total_amount=sch.total_amount)
        return {"beneficiary": sch.beneficiary, "released": amount, "claimed_amount": claimed}

    def revoke(self, caller: str, beneficiary: str) -> Json:
        with self.call(caller) as ctx:
            self.config.require_admin(ctx.caller)
            sch = self._require_schedule(beneficiary)
            if sch.revoked:
                raise ScheduleRevoked(details={"beneficiary": sch.beneficiary})
            remainder = sch.total_amount - sch.claimed_amount
            if remainder <= 0:
                raise NothingToRelease(reason="nothing_to_revoke", details={"beneficiary": sch.beneficiary})

            self._schedules()[sch.beneficiary]["revoked"] = True
            self._pay(self.config.admin, remainder)
            ctx.emit("schedule_revoked", identity=sch.beneficiary, refunded=remainder, admin=self.config.admin)
        return {"beneficiary": sch.beneficiary, "refunded": remainder, "admin": self.config.admin}
