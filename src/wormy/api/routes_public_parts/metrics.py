from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response

from wormy.api.routes_public_parts.common import _executor, _int_param
from wormy.runtime.metrics import format_prometheus, metrics_enabled


router = APIRouter()


@router.get("/metrics")
def metrics() -> Response:
    """Prometheus-style metrics.

    Disabled by default. Enable with:
      WORMY_METRICS_ENABLED=1
    """
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")
    return Response(content=format_prometheus(), media_type="text/plain")


@router.get("/events")
def events(
    request: Request,
    module: Optional[str] = None,
    identity: Optional[str] = None,
    limit: Optional[str] = None,
) -> Dict[str, Any]:
    ex = _executor(request)
    items = ex.events.events(module=module, identity=identity, limit=_int_param(limit, 100))
    return {"ok": True, "events": items}
