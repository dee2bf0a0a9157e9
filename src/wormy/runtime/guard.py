# src/wormy/runtime/guard.py
from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from wormy.runtime.errors import ReentrantCall

Json = Dict[str, Any]


class ReentrancyGuard:
    """Exclusive "call in progress" marker for one module instance.

    A nested entry (for example a ledger callback re-entering the module
    during a transfer) fails immediately with ReentrantCall. The marker is
    released on every exit path, including failures.
    """

    def __init__(self, name: str = "") -> None:
        self.name = str(name)
        self._busy = False
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def enter(self) -> Iterator[None]:
        with self._lock:
            if self._busy:
                raise ReentrantCall(details={"module": self.name})
            self._busy = True
        try:
            yield
        finally:
            with self._lock:
                self._busy = False


@contextmanager
def state_transaction(state: Json) -> Iterator[Json]:
    """Commit-or-restore scope over a mutable state dict.

    On any exception the dict is restored in place to its contents at entry,
    so references held by counters and trackers stay valid.
    """
    snapshot = copy.deepcopy(state)
    try:
        yield state
    except BaseException:
        state.clear()
        state.update(snapshot)
        raise
