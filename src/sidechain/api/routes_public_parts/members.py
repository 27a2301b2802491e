from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from sidechain.api.errors import ApiError
from sidechain.api.routes_public_parts.common import _store

router = APIRouter()

Json = Dict[str, Any]


@router.get("/members/{address}")
def get_member(request: Request, address: str, block_number: Optional[int] = Query(default=None)) -> Json:
    """Member entry from the given snapshot, or from the latest one.

    Reporting/withdraw tooling uses this to read a member's earnings before
    building a proof.
    """
    st = _store(request)
    if block_number is None:
        block_number = st.latest_block_number()
        if block_number is None:
            raise ApiError.not_found("no_blocks", "no block has been committed yet")
    elif not st.block_exists(block_number):
        raise ApiError.not_found("block_not_found", f"no block {block_number}", {"block_number": block_number})

    member = st.find_member(address, block_number)
    if member is None:
        raise ApiError.not_found(
            "member_not_found",
            f"{address} is not in block {block_number}",
            {"address": address, "block_number": block_number},
        )
    return {"ok": True, "block_number": block_number, "member": member}
