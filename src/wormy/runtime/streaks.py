# src/wormy/runtime/streaks.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from wormy.runtime.day_bucket import SECONDS_PER_DAY, _as_int, day_index_of, validate_seconds_per_day

Json = Dict[str, Any]


@dataclass(frozen=True)
class StreakView:
    current: int
    max: int
    last_day: int
    changed: bool = False

    def to_json(self) -> Json:
        return {"current": self.current, "max": self.max, "last_day": self.last_day}


class StreakTracker:
    """Consecutive-day streaks stored under ``state[name]``.

    Layout:
      state[name][identity] = {"current": int, "max": int, "last_day": int}

    An identity with no record has never touched; its first touch always
    starts a streak of 1, whatever the day index is.
    """

    def __init__(
        self,
        state: Json,
        name: str = "streaks",
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

    def _raw(self, identity: str) -> Json | None:
        root = self._state.get(self.name)
        if not isinstance(root, dict):
            return None
        rec = root.get(str(identity))
        return rec if isinstance(rec, dict) else None

    def get(self, identity: str) -> StreakView:
        rec = self._raw(identity)
        if rec is None:
            return StreakView(current=0, max=0, last_day=0)
        return StreakView(
            current=_as_int(rec.get("current"), 0),
            max=_as_int(rec.get("max"), 0),
            last_day=_as_int(rec.get("last_day"), 0),
        )

    def current_streak(self, identity: str, now: int) -> int:
        """Streak as seen at ``now``: 0 once a full day has been missed."""
        rec = self._raw(identity)
        if rec is None:
            return 0
        if self.day_of(now) - _as_int(rec.get("last_day"), 0) > 1:
            return 0
        return _as_int(rec.get("current"), 0)

    def touch(self, identity: str, now: int) -> StreakView:
        day = self.day_of(now)
        rec = self._raw(identity)

        if rec is not None and _as_int(rec.get("last_day"), 0) == day:
            return self.get(identity)

        if rec is not None and _as_int(rec.get("last_day"), 0) + 1 == day:
            current = _as_int(rec.get("current"), 0) + 1
        else:
            current = 1

        best = max(_as_int((rec or {}).get("max"), 0), current)

        root = self._state.get(self.name)
        if not isinstance(root, dict):
            root = {}
            self._state[self.name] = root
        root[str(identity)] = {"current": current, "max": best, "last_day": day}
        return StreakView(current=current, max=best, last_day=day, changed=True)
