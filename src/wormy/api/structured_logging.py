# src/wormy/api/structured_logging.py
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wormy.runtime.metrics import inc_counter
from wormy.util.structured_logging import log_event


def _route_template(request: Request) -> str:
    """Matched route path (``/v1/modules/{name}/status/{identity}``) so metrics stay low-cardinality."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return str(path) if path else "unmatched"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One JSONL line and one ``http_requests`` count per request.

    WORMY_LOG_REQUESTS=0 turns it off. An incoming ``x-request-id`` is reused,
    otherwise one is minted, and it is echoed on the response.
    """

    def __init__(self, app) -> None:
        super().__init__(app)
        raw = (os.environ.get("WORMY_LOG_REQUESTS") or "1").strip().lower()
        self._enabled = raw not in {"0", "false", "no", "n", "off"}
        self._logger = logging.getLogger("wormy.http")

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        started = time.monotonic()
        response: Optional[Response] = None
        err: Optional[str] = None

        try:
            response = await call_next(request)
            return response
        except Exception as e:
            err = type(e).__name__
            raise
        finally:
            status = int(response.status_code) if response is not None else 500
            route = _route_template(request)
            inc_counter("http_requests", route=route, status=status)
            log_event(
                self._logger,
                "http_request",
                request_id=request_id,
                method=request.method,
                route=route,
                path=request.url.path,
                identity=request.path_params.get("identity") or request.path_params.get("beneficiary"),
                status=status,
                duration_ms=int((time.monotonic() - started) * 1000),
                error=err,
            )
            if response is not None:
                response.headers.setdefault("x-request-id", request_id)
