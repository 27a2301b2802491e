from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from sidechain.api.errors import ApiError
from sidechain.storage.file_store import FileStore

Json = Dict[str, Any]


def _store(request: Request) -> FileStore:
    st = getattr(request.app.state, "store", None)
    if st is None:
        raise ApiError.internal("not_ready", "store not attached to app.state", {})
    return st
