from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from sidechain.runtime.store_config import DEFAULT_MAX_LOG_LEN

Json = Dict[str, Any]


def _now_ms() -> int:
    return int(time.time() * 1000)


def truncate(text: str, max_len: int = DEFAULT_MAX_LOG_LEN) -> str:
    """Cap a log field so whole member tables never land in the log."""
    if len(text) < int(max_len):
        return text
    return f"{text[: int(max_len)]}... TOTAL LENGTH: {len(text)}"


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a single JSONL log event.

    Dependency-free and safe for low-level subsystems (storage/api/cli).
    """
    if not logger.isEnabledFor(level):
        return
    payload: Json = {"ts_ms": _now_ms(), "event": str(event)}
    payload.update(fields)
    try:
        logger.log(level, json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    except (TypeError, ValueError):
        parts = [f"event={event}"] + [f"{k}={fields.get(k)!r}" for k in sorted(fields.keys())]
        logger.log(level, " ".join(parts))
