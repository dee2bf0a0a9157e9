from __future__ import annotations

import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wormy.api.errors import ApiError
from wormy.api.routes_public import public_router
from wormy.api.structured_logging import RequestLogMiddleware
from wormy.runtime.executor_boot import build_executor as _build_executor


def build_executor():
    """Build a WormyExecutor for the API runtime.

    This wrapper exists so tests can monkeypatch `wormy.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor()


def create_app(*, boot_runtime: bool = True, executor=None) -> FastAPI:
    """Create the read-only query API.

    boot_runtime:
      - True (default): load config and attach an executor via build_executor()
      - False: attach ``executor`` as given (may be None) for tests
    """
    mode = os.environ.get("WORMY_MODE", "prod").strip().lower()

    if mode == "prod":
        app = FastAPI(title="Wormy Runtime API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="Wormy Runtime API")

    app.state.executor = build_executor() if boot_runtime else executor

    @app.exception_handler(ApiError)
    async def _api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=int(exc.status_code), content=exc.to_json())

    app.add_middleware(RequestLogMiddleware)
    app.include_router(public_router)
    return app
