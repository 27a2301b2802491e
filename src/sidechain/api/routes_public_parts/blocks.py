# src/sidechain/api/routes_public_parts/blocks.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from sidechain.api.errors import ApiError
from sidechain.api.routes_public_parts.common import _store

router = APIRouter()

Json = Dict[str, Any]


@router.get("/blocks")
def list_blocks(request: Request, max_latest: Optional[int] = Query(default=None, ge=0)) -> Json:
    """Stored block numbers, ascending; max_latest keeps only the newest N."""
    return {"ok": True, "block_numbers": _store(request).list_block_numbers(max_latest)}


# Declared before /blocks/{block_number} so "latest" is not parsed as an int.
@router.get("/blocks/latest")
def latest_block(request: Request) -> Json:
    block = _store(request).get_latest_block()
    if block is None:
        raise ApiError.not_found("no_blocks", "no block has been committed yet")
    return {"ok": True, "block": block}


@router.get("/blocks/{block_number}")
def get_block(request: Request, block_number: int) -> Json:
    st = _store(request)
    if not st.block_exists(block_number):
        raise ApiError.not_found("block_not_found", f"no block {block_number}", {"block_number": block_number})
    return {"ok": True, "block": st.load_block(block_number)}
