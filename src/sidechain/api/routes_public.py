# src/sidechain/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from sidechain.api.routes_public_parts.blocks import router as blocks_router
from sidechain.api.routes_public_parts.events import router as events_router
from sidechain.api.routes_public_parts.health import router as health_router
from sidechain.api.routes_public_parts.members import router as members_router
from sidechain.api.routes_public_parts.state import router as state_router

public_router = APIRouter()

# Versioned, read-only API surface
public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(blocks_router, prefix="/v1", tags=["blocks"])
public_router.include_router(events_router, prefix="/v1", tags=["events"])
public_router.include_router(members_router, prefix="/v1", tags=["members"])
public_router.include_router(state_router, prefix="/v1", tags=["state"])
