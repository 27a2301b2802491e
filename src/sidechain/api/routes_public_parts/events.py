from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from sidechain.api.routes_public_parts.common import _store

router = APIRouter()

Json = Dict[str, Any]


@router.get("/events")
def list_events(
    request: Request,
    from_block: int = Query(...),
    to_block: Optional[int] = Query(default=None),
) -> Json:
    """Join/part events for from_block..to_block INCLUSIVE (to_block defaults to from_block)."""
    events = _store(request).load_events(from_block, to_block)
    return {"ok": True, "from_block": from_block, "to_block": from_block if to_block is None else to_block, "events": events}
