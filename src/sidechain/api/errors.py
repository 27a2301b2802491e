from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sidechain.storage.errors import FileSystemError, ParseError, StoreError, ValidationError


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def not_found(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(404, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})

    @staticmethod
    def from_store_error(e: StoreError) -> "ApiError":
        details: Dict[str, Any] = {"store_code": e.code}
        if isinstance(e, ValidationError):
            return ApiError.bad_request("bad_request", e.reason, details)
        # Filesystem paths stay in the server log, not in responses.
        if isinstance(e, ParseError):
            return ApiError.internal("store_corrupted", "a stored file could not be parsed", details)
        if isinstance(e, FileSystemError):
            return ApiError.internal("store_io_error", "store read failed", details)
        return ApiError.internal("store_error", e.reason, details)

    def to_json(self) -> Dict[str, Any]:
        return {"ok": False, "error": {"code": self.code, "message": self.message, "details": self.details}}
