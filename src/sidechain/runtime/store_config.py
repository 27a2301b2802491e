# src/sidechain/runtime/store_config.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Log fields longer than this are truncated with a "... TOTAL LENGTH" suffix.
DEFAULT_MAX_LOG_LEN = 840

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    if v is None or isinstance(v, bool):
        return int(default)
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class StoreConfig:
    store_dir: str

    # Log fields longer than this are truncated.
    max_log_len: int
    log_level: str

    # fsync file + directory on every write. Tests may turn it off for speed.
    fsync: bool

    api_host: str
    api_port: int


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_store_config(cfg: StoreConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.store_dir, str) or not cfg.store_dir.strip():
        raise ValueError("store_dir must be a non-empty string")

    if int(cfg.max_log_len) <= 0:
        raise ValueError(f"max_log_len must be > 0; got: {cfg.max_log_len}")

    if str(cfg.log_level or "").strip().upper() not in _LOG_LEVELS:
        raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}; got: {cfg.log_level!r}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")


def default_store_config() -> StoreConfig:
    return StoreConfig(
        store_dir="./store",
        max_log_len=DEFAULT_MAX_LOG_LEN,
        log_level="INFO",
        fsync=True,
        api_host="127.0.0.1",
        api_port=8080,
    )


def _config_from_mapping(raw: Json) -> StoreConfig:
    d = default_store_config()
    cfg = StoreConfig(
        store_dir=_as_str(raw.get("store_dir"), d.store_dir),
        max_log_len=_as_int(raw.get("max_log_len"), d.max_log_len),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
        fsync=_as_bool(raw.get("fsync"), d.fsync),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
    )
    validate_store_config(cfg)
    return cfg


def read_store_config_file(path: str) -> StoreConfig:
    """Read a .json, .yaml or .yml config file. Missing keys take defaults."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML in {path}: {e}") from e
    else:
        raw = json.loads(text)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("store config must be a mapping")
    return _config_from_mapping(raw)


def store_config_from_env() -> StoreConfig:
    return _config_from_mapping(
        {
            "store_dir": os.environ.get("SIDECHAIN_STORE_DIR"),
            "max_log_len": os.environ.get("SIDECHAIN_MAX_LOG_LEN"),
            "log_level": os.environ.get("SIDECHAIN_LOG_LEVEL"),
            "fsync": os.environ.get("SIDECHAIN_FSYNC"),
            "api_host": os.environ.get("SIDECHAIN_API_HOST"),
            "api_port": os.environ.get("SIDECHAIN_API_PORT"),
        }
    )


def load_store_config(*, config_path: Optional[str] = None) -> StoreConfig:
    p = config_path or os.environ.get("SIDECHAIN_CONFIG_PATH")
    if p:
        return read_store_config_file(p)
    return store_config_from_env()


def log_level_value(cfg: StoreConfig) -> int:
    return int(getattr(logging, cfg.log_level.strip().upper(), logging.INFO))
