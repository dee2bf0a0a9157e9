# src/wormy/runtime/day_bucket.py
from __future__ import annotations

"""
Daily rate-limit accounting.

A continuous clock is quantized into integer day indices. Each identity owns
one (day, count) record per counter. Records are reset lazily: a record whose
stored day is older than today counts as zero for every read and for the cap
check, and is only rewritten when the identity acts again. There is no
background job.
"""

from dataclasses import dataclass
from typing import Any, Dict

from wormy.runtime.errors import InvalidConfiguration, RateLimitExceeded

Json = Dict[str, Any]

SECONDS_PER_DAY = 86_400

# Counts are stored as small unsigned integers on the host ledger (uint8).
MAX_DAILY_CAP = 255


def _as_int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _ensure_root_dict(state: Json, key: str) -> Json:
    cur = state.get(key)
    if not isinstance(cur, dict):
        cur = {}
        state[key] = cur
    return cur


def validate_seconds_per_day(seconds_per_day: Any) -> int:
    spd = _as_int(seconds_per_day, 0)
    if isinstance(seconds_per_day, bool) or spd <= 0:
        raise InvalidConfiguration(reason="seconds_per_day_must_be_positive", details={"seconds_per_day": seconds_per_day})
    return spd


def validate_daily_cap(cap: Any) -> int:
    """Reject caps that are zero, negative, or wider than the stored counter."""
    if isinstance(cap, bool) or not isinstance(cap, int):
        raise InvalidConfiguration(reason="daily_cap_must_be_int", details={"daily_cap": cap})
    if cap <= 0:
        raise InvalidConfiguration(reason="daily_cap_must_be_positive", details={"daily_cap": cap})
    if cap > MAX_DAILY_CAP:
        raise InvalidConfiguration(reason="daily_cap_too_large", details={"daily_cap": cap, "max": MAX_DAILY_CAP})
    return cap


def day_index_of(now: int, *, seconds_per_day: int = SECONDS_PER_DAY, start_time: int = 0) -> int:
    return (int(now) - int(start_time)) // int(seconds_per_day)


def seconds_until_next_day(now: int, *, seconds_per_day: int = SECONDS_PER_DAY, start_time: int = 0) -> int:
    """Seconds until the next day boundary, in 1..seconds_per_day."""
    spd = int(seconds_per_day)
    return spd - ((int(now) - int(start_time)) % spd)


@dataclass(frozen=True)
class ConsumeResult:
    allowed: bool
    new_count: int
    day: int


class DayBucketCounter:
    """Per-identity daily usage counter stored under ``state[name]``.

    Layout:
      state[name][identity] = {"day": <day index>, "count": <int>}
    """

    def __init__(
        self,
        state: Json,
        name: str,
        *,
        seconds_per_day: int = SECONDS_PER_DAY,
        start_time: int = 0,
    ) -> None:
        self._state = state
        self.name = str(name)
        self.seconds_per_day = validate_seconds_per_day(seconds_per_day)
        self.start_time = int(start_time)

    def day_of(self, now: int) -> int:
        return day_index_of(now, seconds_per_day=self.seconds_per_day, start_time=self.start_time)

    def seconds_until_next_day(self, now: int) -> int:
        return seconds_until_next_day(now, seconds_per_day=self.seconds_per_day, start_time=self.start_time)

    def _records(self) -> Json:
        return _ensure_root_dict(self._state, self.name)

    def record(self, identity: str) -> Json:
        """Raw stored record (may be stale). Absent identities read as day 0, count 0."""
        rec = self._state.get(self.name, {}).get(str(identity))
        if not isinstance(rec, dict):
            return {"day": 0, "count": 0}
        return {"day": _as_int(rec.get("day"), 0), "count": _as_int(rec.get("count"), 0)}

    def count_for(self, identity: str, now: int) -> int:
        rec = self._state.get(self.name, {}).get(str(identity))
        if not isinstance(rec, dict):
            return 0
        if _as_int(rec.get("day"), 0) != self.day_of(now):
            return 0
        return _as_int(rec.get("count"), 0)

    def remaining(self, identity: str, now: int, daily_cap: int) -> int:
        return max(0, int(daily_cap) - self.count_for(identity, now))

    def try_consume(self, identity: str, now: int, daily_cap: int) -> ConsumeResult:
        cap = validate_daily_cap(daily_cap)
        today = self.day_of(now)
        current = self.count_for(identity, now)
        if current >= cap:
            raise RateLimitExceeded(
                details={"counter": self.name, "identity": str(identity), "day": today, "count": current, "daily_cap": cap}
            )

        new_count = current + 1
        self._records()[str(identity)] = {"day": today, "count": new_count}
        return ConsumeResult(allowed=True, new_count=new_count, day=today)
