from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from sidechain.api.routes_public_parts.common import _store

router = APIRouter()

Json = Dict[str, Any]


@router.get("/health")
def health(request: Request) -> Json:
    st = _store(request)
    return {
        "ok": True,
        "store_dir": str(st.store_dir),
        "has_latest_block": st.has_latest_block(),
        "latest_block_number": st.latest_block_number(),
    }
