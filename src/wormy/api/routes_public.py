# src/wormy/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from wormy.api.routes_public_parts.game import router as game_router
from wormy.api.routes_public_parts.metrics import router as metrics_router
from wormy.api.routes_public_parts.modules import router as modules_router
from wormy.api.routes_public_parts.status import router as status_router

public_router = APIRouter()

# Read-only query surface. State changes only go through WormyExecutor.submit.
public_router.include_router(status_router, prefix="/v1", tags=["status"])
public_router.include_router(modules_router, prefix="/v1", tags=["modules"])
public_router.include_router(game_router, prefix="/v1", tags=["game"])
public_router.include_router(metrics_router, prefix="/v1", tags=["ops"])
