# src/sidechain/api/routes_public_parts/state.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from sidechain.api.routes_public_parts.common import _store

router = APIRouter()

Json = Dict[str, Any]


@router.get("/state")
def operator_state(request: Request) -> Json:
    """Return the operator state document ({} if never saved).

    A corrupted document surfaces as 500 store_corrupted, not as {}.
    """
    return {"ok": True, "state": _store(request).load_state()}
