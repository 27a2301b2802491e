"""Atomic file persistence helpers.

Every file the store writes goes through atomic_write_bytes():
  - write to a temp file in the destination directory
  - flush + fsync
  - os.replace() onto the destination
  - fsync the directory so the rename itself is durable

A reader therefore sees either the previous content or the new content,
never a half-written file. Temp names end in ".tmp" and never match the
snapshot filename pattern.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from sidechain.storage.errors import FileSystemError


def json_dumps(obj: Any) -> bytes:
    # Do not coerce unknown types (no default=str); non-JSON values must fail loudly.
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _fsync_dir(dir_path: Path) -> None:
    try:
        fd = os.open(str(dir_path), os.O_DIRECTORY)
    except (OSError, AttributeError):
        # O_DIRECTORY is unavailable on some platforms.
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes, *, fsync: bool = True) -> None:
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    except OSError as e:
        raise FileSystemError("write_failed", str(e), str(path)) from e
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            if fsync:
                os.fsync(f.fileno())

        os.replace(str(tmp_path), str(path))
        if fsync:
            _fsync_dir(path.parent)
    except OSError as e:
        raise FileSystemError("write_failed", str(e), str(path)) from e
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def atomic_write_json(path: Path, obj: Any, *, fsync: bool = True) -> bytes:
    """Serialize obj and write it atomically. Returns the bytes written."""
    data = json_dumps(obj)
    atomic_write_bytes(path, data, fsync=fsync)
    return data
