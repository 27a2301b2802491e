from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sidechain.api.errors import ApiError
from sidechain.api.routes_public import public_router
from sidechain.api.structured_logging import RequestLogMiddleware
from sidechain.runtime.store_config import StoreConfig, load_store_config
from sidechain.storage.errors import StoreError
from sidechain.storage.file_store import FileStore
from sidechain.storage.store_logging import log_event

_log = logging.getLogger("sidechain.http")


def build_store(cfg: Optional[StoreConfig] = None) -> FileStore:
    """Build the FileStore the API reads from.

    This wrapper exists so tests can monkeypatch `sidechain.api.app.build_store`
    without touching the filesystem layout.
    """
    return FileStore(cfg or load_store_config())


def create_app(*, store: Optional[FileStore] = None, config: Optional[StoreConfig] = None) -> FastAPI:
    """Create the read-only query API over a side-chain store.

    store:
      - given: attached as-is (tests, embedding in an engine process)
      - None: built from config, else from SIDECHAIN_* env / SIDECHAIN_CONFIG_PATH
    """
    app = FastAPI(title="Side-chain Store API")

    app.state.store = store if store is not None else build_store(config)

    @app.exception_handler(ApiError)
    async def _api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_json())

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
        err = ApiError.from_store_error(exc)
        log_event(
            _log,
            "store_error",
            level=logging.ERROR if err.status_code >= 500 else logging.WARNING,
            path=str(request.url.path or ""),
            code=exc.code,
            reason=exc.reason,
            file=exc.path,
        )
        return JSONResponse(status_code=err.status_code, content=err.to_json())

    app.add_middleware(RequestLogMiddleware)

    app.include_router(public_router)

    return app
