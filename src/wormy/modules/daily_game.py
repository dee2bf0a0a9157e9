# src/wormy/modules/daily_game.py
from __future__ import annotations

"""
Daily engagement game: check-ins, votes, cheers and predictions.

Each action has its own daily cap. Only check-ins drive the streak; the
tracker is a separate component so other actions could share it later.

State layout:
  state["check_in"|"vote"|"cheer"|"predict"][identity] -> {"day", "count"}
  state["streaks"][identity]                           -> {"current", "max", "last_day"}
  state["days"][identity][str(day)]                    -> per-day activity record
  state["vote_tally"][str(day)][str(option)]           -> votes cast for option that day
  state["cheers_received"][identity]                   -> lifetime cheers received
  state["points"][identity]                            -> lifetime game points
"""

from typing import Any, Dict

from wormy.runtime.admin_config import DailyGameParams
from wormy.runtime.day_bucket import DayBucketCounter
from wormy.runtime.errors import InvalidArgument
from wormy.runtime.module import CallContext, WormyModule
from wormy.runtime.streaks import StreakTracker

Json = Dict[str, Any]

ACTIONS = ("check_in", "vote", "cheer", "predict")


def _empty_day() -> Json:
    return {"checked_in": False, "votes": [], "cheers": [], "predictions": []}


class DailyGameModule(WormyModule):
    MODULE = "game"
    PARAMS = DailyGameParams

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.counters: Dict[str, DayBucketCounter] = {
            name: DayBucketCounter(self.state, name, seconds_per_day=self.seconds_per_day, start_time=self.start_time)
            for name in ACTIONS
        }
        self.streaks = StreakTracker(self.state, "streaks", seconds_per_day=self.seconds_per_day, start_time=self.start_time)

    def _cap(self, action: str) -> int:
        return int(getattr(self.params, f"{action}_cap"))

    def _points(self, action: str) -> int:
        return int(getattr(self.params, f"{action}_points"))

    def _begin(self, ctx: CallContext, action: str, signature: bytes) -> tuple:
        self._require_active()
        self._verify_identity(ctx, signature)
        res = self.counters[action].try_consume(ctx.caller, ctx.now, self._cap(action))
        day_rec = self.state.setdefault("days", {}).setdefault(ctx.caller, {}).setdefault(str(ctx.day), _empty_day())
        return res, day_rec

    def _award(self, ctx: CallContext, action: str) -> int:
        pts = self._points(action)
        points = self.state.setdefault("points", {})
        points[ctx.caller] = int(points.get(ctx.caller, 0)) + pts
        return points[ctx.caller]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def check_in(self, caller: str, signature: bytes) -> Json:
        with self.call(caller) as ctx:
            res, day_rec = self._begin(ctx, "check_in", signature)
            day_rec["checked_in"] = True
            total = self._award(ctx, "check_in")
            streak = self.streaks.touch(ctx.caller, ctx.now)
            ctx.emit("checked_in", identity=ctx.caller, count=res.new_count, points=total)
            if streak.changed:
                ctx.emit("streak_updated", identity=ctx.caller, current=streak.current, max=streak.max)
        return {"day": res.day, "count": res.new_count, "points": total, "streak": streak.to_json()}

    def vote(self, caller: str, signature: bytes, option: int) -> Json:
        with self.call(caller) as ctx:
            if isinstance(option, bool) or not isinstance(option, int) or not (0 <= option < int(self.params.num_vote_options)):
                raise InvalidArgument(reason="invalid_vote_option", details={"option": option, "num_vote_options": int(self.params.num_vote_options)})
            res, day_rec = self._begin(ctx, "vote", signature)
            day_rec["votes"].append(option)
            tally = self.state.setdefault("vote_tally", {}).setdefault(str(ctx.day), {})
            tally[str(option)] = int(tally.get(str(option), 0)) + 1
            total = self._award(ctx, "vote")
            ctx.emit("voted", identity=ctx.caller, option=option, count=res.new_count, option_votes=tally[str(option)], points=total)
        return {"day": res.day, "count": res.new_count, "option": option, "option_votes": tally[str(option)], "points": total}

    def cheer(self, caller: str, signature: bytes, target: str) -> Json:
        with self.call(caller) as ctx:
            tgt = str(target or "").strip()
            if not tgt:
                raise InvalidArgument(reason="missing_cheer_target")
            if tgt == ctx.caller:
                raise InvalidArgument(reason="cannot_cheer_self", details={"target": tgt})
            res, day_rec = self._begin(ctx, "cheer", signature)
            day_rec["cheers"].append(tgt)
            received = self.state.setdefault("cheers_received", {})
            received[tgt] = int(received.get(tgt, 0)) + 1
            total = self._award(ctx, "cheer")
            ctx.emit("cheered", identity=ctx.caller, target=tgt, count=res.new_count, target_cheers=received[tgt], points=total)
        return {"day": res.day, "count": res.new_count, "target": tgt, "target_cheers": received[tgt], "points": total}

    def predict(self, caller: str, signature: bytes, value: int) -> Json:
        with self.call(caller) as ctx:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgument(reason="prediction_must_be_int", details={"value": value})
            res, day_rec = self._begin(ctx, "predict", signature)
            day_rec["predictions"].append(value)
            total = self._award(ctx, "predict")
            ctx.emit("predicted", identity=ctx.caller, value=value, count=res.new_count, points=total)
        return {"day": res.day, "count": res.new_count, "value": value, "points": total}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def status_for_day(self, identity: str, day: int) -> Json:
        rec = self.state.get("days", {}).get(str(identity), {}).get(str(int(day)))
        out = _empty_day() if not isinstance(rec, dict) else {k: (list(v) if isinstance(v, list) else v) for k, v in rec.items()}
        out.update({"identity": str(identity), "day": int(day)})
        return out

    def status(self, identity: str) -> Json:
        now = self.clock.now()
        out = self.status_for_day(identity, self.day_of(now))
        out["remaining"] = {a: self.counters[a].remaining(identity, now, self._cap(a)) for a in ACTIONS}
        out["streak"] = self.streak(identity)
        out["points"] = self.points(identity)
        out["seconds_until_next_day"] = self.seconds_until_next_day(now)
        return out

    def streak(self, identity: str) -> Json:
        view = self.streaks.get(identity)
        return {
            "current": self.streaks.current_streak(identity, self.clock.now()),
            "recorded": view.current,
            "max": view.max,
            "last_day": view.last_day,
        }

    def points(self, identity: str) -> int:
        return int(self.state.get("points", {}).get(str(identity), 0))

    def vote_tally(self, day: int) -> Dict[int, int]:
        raw = self.state.get("vote_tally", {}).get(str(int(day)), {})
        return {int(k): int(v) for k, v in raw.items()}

    def cheers_received(self, identity: str) -> int:
        return int(self.state.get("cheers_received", {}).get(str(identity), 0))
