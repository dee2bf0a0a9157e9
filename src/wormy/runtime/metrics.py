from __future__ import annotations

"""
Process-local counters and gauges with optional labels.

Series are keyed by (name, sorted labels). Runtime code records:

  module_calls{module, outcome}   committed / rejected module calls
  module_events{module, event}    published module events
  tx_receipts{outcome}            applied / rejected / refused executor receipts
  http_requests{route, status}    API requests by matched route template
  observer_failures{module}       event observers that raised after commit
  height                          sealed block height (gauge)

Exposure over HTTP is off unless WORMY_METRICS_ENABLED is truthy.
"""

import os
import threading
import time
from typing import Dict, Tuple

Labels = Tuple[Tuple[str, str], ...]
SeriesKey = Tuple[str, Labels]

_lock = threading.Lock()
_counters: Dict[SeriesKey, int] = {}
_gauges: Dict[SeriesKey, int] = {}
_started_ms = int(time.time() * 1000)


def metrics_enabled() -> bool:
    v = (os.environ.get("WORMY_METRICS_ENABLED") or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def _key(name: str, labels: Dict[str, object]) -> SeriesKey | None:
    n = str(name or "").strip()
    if not n:
        return None
    return n, tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def series_name(key: SeriesKey) -> str:
    name, labels = key
    if not labels:
        return name
    inner = ",".join(f'{k}="{v}"' for k, v in labels)
    return f"{name}{{{inner}}}"


def inc_counter(name: str, value: int = 1, **labels: object) -> None:
    k = _key(name, labels)
    if k is None:
        return
    with _lock:
        _counters[k] = int(_counters.get(k, 0)) + int(value)


def set_gauge(name: str, value: int, **labels: object) -> None:
    k = _key(name, labels)
    if k is None:
        return
    with _lock:
        _gauges[k] = int(value)


def counter_value(name: str, **labels: object) -> int:
    k = _key(name, labels)
    if k is None:
        return 0
    with _lock:
        return int(_counters.get(k, 0))


def snapshot() -> dict:
    now_ms = int(time.time() * 1000)
    with _lock:
        return {
            "ts_ms": now_ms,
            "started_ms": int(_started_ms),
            "uptime_ms": now_ms - int(_started_ms),
            "counters": {series_name(k): v for k, v in _counters.items()},
            "gauges": {series_name(k): v for k, v in _gauges.items()},
        }


def _metric_name(name: str) -> str:
    return "".join(ch if (ch.isalnum() or ch == "_") else "_" for ch in name)


def _label_value(v: str) -> str:
    return v.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _exposition_line(prefix: str, key: SeriesKey, value: int) -> str:
    name, labels = key
    metric = f"{prefix}{_metric_name(name)}"
    if labels:
        inner = ",".join(f'{_metric_name(k)}="{_label_value(v)}"' for k, v in labels)
        metric = f"{metric}{{{inner}}}"
    return f"{metric} {int(value)}"


def format_prometheus(prefix: str = "wormy_") -> str:
    """Prometheus exposition text: one line per series, sorted for stable scrapes."""
    pre = str(prefix or "").strip() or "wormy_"
    with _lock:
        counters = sorted(_counters.items())
        gauges = sorted(_gauges.items())
    uptime = int(time.time() * 1000) - int(_started_ms)

    lines = [f"{pre}uptime_ms {uptime}"]
    lines.extend(_exposition_line(pre, k, v) for k, v in counters)
    lines.extend(_exposition_line(pre, k, v) for k, v in gauges)
    return "\n".join(lines) + "\n"


def reset_for_tests() -> None:
    with _lock:
        _counters.clear()
        _gauges.clear()
