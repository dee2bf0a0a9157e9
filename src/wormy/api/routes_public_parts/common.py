from __future__ import annotations

from typing import Any, Callable, Dict

from fastapi import Request

from wormy.api.errors import ApiError
from wormy.runtime.errors import WormyError

Json = Dict[str, Any]


def _executor(request: Request):
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _module(request: Request, name: str):
    ex = _executor(request)
    mod = getattr(ex, "modules", {}).get(name)
    if mod is None:
        raise ApiError.not_found("unknown_module", f"no module named {name!r}", {"module": name})
    return mod


def _query(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a module query, surfacing module errors as API errors."""
    try:
        return fn(*args, **kwargs)
    except WormyError as e:
        raise ApiError.from_wormy(e)


def _int_param(v: Any, default: int) -> int:
    """Parse an int-ish query param safely."""
    if v is None:
        return int(default)
    try:
        s = str(v).strip()
        if s == "":
            return int(default)
        return int(s)
    except ValueError:
        return int(default)
