# src/wormy/runtime/events.py
from __future__ import annotations

"""
Committed state-change notifications.

Each event carries enough to rebuild history off-chain without re-querying
state: module, event name, identity, day index, new counter/streak values
and reward amount where one applies.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from wormy.runtime.metrics import inc_counter
from wormy.util.structured_logging import log_event

Json = Dict[str, Any]
Observer = Callable[[Json], None]

_log = logging.getLogger("wormy.events")


class EventLog:
    """Append-only in-memory event log with observer callbacks."""

    def __init__(self, *, max_events: int = 10_000) -> None:
        self._lock = threading.Lock()
        self._events: List[Json] = []
        self._observers: List[Observer] = []
        self._seq = 0
        self.max_events = int(max_events)

    def subscribe(self, fn: Observer) -> None:
        with self._lock:
            self._observers.append(fn)

    def publish(self, events: List[Json]) -> None:
        with self._lock:
            out: List[Json] = []
            for ev in events:
                self._seq += 1
                rec = dict(ev)
                rec["seq"] = self._seq
                out.append(rec)
            self._events.extend(out)
            if self.max_events > 0 and len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]
            observers = list(self._observers)

        # Runs after commit: nothing here may turn a committed call into a failure.
        for rec in out:
            fields = {k: v for k, v in rec.items() if k != "event"}
            log_event(_log, "module_event", module_event=rec.get("event"), **fields)
            inc_counter("module_events", module=rec.get("module"), event=rec.get("event"))
            for fn in observers:
                try:
                    fn(rec)
                except Exception as e:
                    inc_counter("observer_failures", module=rec.get("module"))
                    log_event(
                        _log,
                        "observer_failed",
                        seq=rec.get("seq"),
                        module=rec.get("module"),
                        module_event=rec.get("event"),
                        error=type(e).__name__,
                        detail=str(e),
                    )

    def events(self, *, module: Optional[str] = None, identity: Optional[str] = None, limit: int = 100) -> List[Json]:
        with self._lock:
            items = list(self._events)
        if module:
            items = [e for e in items if e.get("module") == module]
        if identity:
            items = [e for e in items if e.get("identity") == identity]
        if limit > 0:
            items = items[-int(limit):]
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
