from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from sidechain.ledger.types import to_json
from sidechain.runtime.store_config import DEFAULT_MAX_LOG_LEN, StoreConfig
from sidechain.storage.atomic import atomic_write_json, json_dumps
from sidechain.storage.errors import (
    BlockNotFoundError,
    FileSystemError,
    ParseError,
    StateCorruptedError,
    ValidationError,
)
from sidechain.storage.paths import PathLike, StorePaths, block_number_from_filename
from sidechain.storage.store_logging import log_event, truncate

Json = Dict[str, Any]

_log = logging.getLogger("sidechain.storage")


def _read_text(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise FileSystemError("read_failed", str(e), str(path)) from e
    except UnicodeDecodeError as e:
        raise ParseError("bad_encoding", f"not UTF-8: {e}", str(path)) from e


def _parse(raw: str, path: Path, *, what: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ParseError("bad_json", f"{what}: {e}", str(path)) from e


def _require_block_number(v: Any) -> int:
    # bool is an int subclass; True would otherwise become block 1.
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ValidationError("bad_block_number", f"blockNumber must be a positive int, got {v!r}")
    return v


def _require_int(v: Any, *, field: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError("bad_int", f"{field} must be an int, got {v!r}")
    return v


class FileStore:
    """Directory-backed store for side-chain blocks, join/part events and operator state.

    Single-writer: exactly one ledger engine owns a store root at a time and
    no locking is done here. Callers must serialize save_events() calls for
    the same block number; the read-merge-rewrite would lose updates otherwise.
    """

    def __init__(
        self,
        store_dir: Union[PathLike, StoreConfig],
        *,
        max_log_len: int = DEFAULT_MAX_LOG_LEN,
        fsync: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if isinstance(store_dir, StoreConfig):
            cfg = store_dir
            store_dir = cfg.store_dir
            max_log_len = cfg.max_log_len
            fsync = cfg.fsync

        self.paths = StorePaths.at(store_dir)
        self.max_log_len = int(max_log_len)
        self.fsync = bool(fsync)
        self.log = logger or _log

        log_event(self.log, "store_init", store_dir=str(self.paths.root))
        self.paths.ensure()

    @property
    def store_dir(self) -> Path:
        return self.paths.root

    def _sanitize(self, obj: Any) -> str:
        return truncate(json_dumps(obj).decode("utf-8"), self.max_log_len)

    def _write(self, path: Path, obj: Any) -> bytes:
        try:
            return atomic_write_json(path, obj, fsync=self.fsync)
        except (TypeError, ValueError) as e:
            raise ValidationError("not_json", f"value is not JSON-serializable: {e}", str(path)) from e

    # ------------------------------------------------------------------
    # Operator state
    # ------------------------------------------------------------------

    def load_state(self) -> Json:
        """Operator state document, or {} if it was never saved."""
        path = self.paths.state_path
        log_event(self.log, "state_load", path=str(path))
        if not path.exists():
            return {}
        try:
            raw = _read_text(path)
        except ParseError as e:
            raise StateCorruptedError("state_corrupted", e.reason, str(path)) from e
        try:
            state = json.loads(raw)
        except ValueError as e:
            raise StateCorruptedError("state_corrupted", str(e), str(path)) from e
        if not isinstance(state, dict):
            raise StateCorruptedError("state_corrupted", f"expected object, got {type(state).__name__}", str(path))
        return state

    def save_state(self, state: Mapping[str, Any]) -> None:
        """Replace the whole operator state document. No merge with prior content."""
        if not isinstance(state, Mapping):
            raise ValidationError("bad_state", f"state must be a mapping, got {type(state).__name__}")
        path = self.paths.state_path
        data = self._write(path, dict(state))
        log_event(self.log, "state_save", path=str(path), state=truncate(data.decode("utf-8"), self.max_log_len))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def save_block(self, block: Any) -> None:
        """Persist a snapshot and advance the latest pointer if it is not older."""
        raw = to_json(block)
        if not isinstance(raw, Mapping):
            raise ValidationError("bad_block", f"block must be a mapping, got {type(block).__name__}")
        block_number = _require_block_number(raw.get("blockNumber"))

        path = self.paths.block_path(block_number)
        log_event(self.log, "block_save", block_number=block_number, path=str(path))
        if path.exists():
            log_event(self.log, "block_overwrite", level=logging.WARNING, block_number=block_number, path=str(path))

        # a bad pointer fails the save before anything lands on disk
        current = self._read_latest_pointer()
        self._write(path, dict(raw))
        self._advance_latest(block_number, current)

    def _read_latest_pointer(self) -> Optional[int]:
        path = self.paths.latest_path
        if not path.exists():
            return None
        pointer = _parse(_read_text(path), path, what="latest pointer")
        if not isinstance(pointer, dict):
            raise ParseError("bad_pointer", "latest pointer must be an object", str(path))
        try:
            return _require_block_number(pointer.get("blockNumber"))
        except ValidationError as e:
            raise ParseError("bad_pointer", e.reason, str(path)) from e

    def _advance_latest(self, block_number: int, current: Optional[int]) -> None:
        if current is not None and current > block_number:
            log_event(self.log, "latest_keep", block_number=block_number, latest=current)
            return

        pointer = {"blockNumber": block_number, "path": self.paths.block_path(block_number).name}
        self._write(self.paths.latest_path, pointer)
        log_event(self.log, "latest_advance", block_number=block_number, previous=current)

    def load_block(self, block_number: int) -> Json:
        """Strict read: a missing or unparsable snapshot raises."""
        block_number = _require_int(block_number, field="block_number")
        path = self.paths.block_path(block_number)
        log_event(self.log, "block_load", block_number=block_number, path=str(path))
        if not path.exists():
            raise BlockNotFoundError("block_not_found", f"no snapshot for block {block_number}", str(path))
        return _parse(_read_text(path), path, what=f"block {block_number}")

    def has_latest_block(self) -> bool:
        return self.paths.latest_path.exists()

    def latest_block_number(self) -> Optional[int]:
        """Block number the latest pointer names, without loading the snapshot."""
        return self._read_latest_pointer()

    def get_latest_block(self) -> Optional[Json]:
        """Highest committed snapshot, or None if no block was ever saved."""
        latest = self._read_latest_pointer()
        if latest is None:
            return None
        return self.load_block(latest)

    def block_exists(self, block_number: int) -> bool:
        return self.paths.block_path(_require_int(block_number, field="block_number")).exists()

    def list_block_numbers(self, max_latest: Optional[int] = None) -> List[int]:
        """Stored block numbers, ascending. With max_latest, only the highest ones."""
        if max_latest is not None:
            max_latest = _require_int(max_latest, field="max_latest")
            if max_latest < 0:
                raise ValidationError("bad_max_latest", f"max_latest must be >= 0, got {max_latest}")

        try:
            names = [p.name for p in self.paths.blocks_dir.iterdir()]
        except OSError as e:
            raise FileSystemError("list_failed", str(e), str(self.paths.blocks_dir)) from e

        numbers = sorted(n for n in (block_number_from_filename(x) for x in names) if n is not None)
        if max_latest:
            numbers = numbers[-max_latest:]
        return numbers

    def find_member(self, address: str, block_number: Optional[int] = None) -> Optional[Json]:
        """Member entry for address in the given (or latest) snapshot, or None."""
        block = self.get_latest_block() if block_number is None else self.load_block(block_number)
        if block is None:
            return None
        if not isinstance(block, dict):
            raise ParseError("bad_block", "snapshot must be an object")
        want = str(address or "").strip().lower()
        for member in block.get("members") or []:
            if isinstance(member, dict) and str(member.get("address", "")).lower() == want:
                return member
        return None

    # ------------------------------------------------------------------
    # Join/part events
    # ------------------------------------------------------------------

    def _event_block_numbers(self) -> List[int]:
        try:
            names = [p.name for p in self.paths.events_dir.iterdir()]
        except OSError as e:
            raise FileSystemError("list_failed", str(e), str(self.paths.events_dir)) from e

        out: List[int] = []
        for name in names:
            if not name.endswith(".json"):
                continue
            try:
                n = int(name[: -len(".json")])
            except ValueError:
                continue
            # only names event_path() produces ("7.json", not "007.json")
            if self.paths.event_path(n).name == name:
                out.append(n)
        return sorted(out)

    def _read_event_list(self, path: Path, *, block_number: int) -> List[Any]:
        events = _parse(_read_text(path), path, what=f"events of block {block_number}")
        if not isinstance(events, list):
            raise ParseError("bad_events", f"expected array, got {type(events).__name__}", str(path))
        return events

    def save_events(self, block_number: int, events: Any) -> None:
        """Append one event or a list of events to the block's event log."""
        block_number = _require_int(block_number, field="block_number")
        new_events = [to_json(e) for e in (events if isinstance(events, (list, tuple)) else [events])]
        if not new_events:
            log_event(self.log, "events_empty", level=logging.DEBUG, block_number=block_number)
            return

        path = self.paths.event_path(block_number)
        try:
            old_events = self._read_event_list(path, block_number=block_number)
        except FileSystemError:
            # missing or unreadable: start a fresh list
            old_events = []

        log_event(
            self.log,
            "events_save",
            block_number=block_number,
            path=str(path),
            count=len(new_events),
            appended_after=len(old_events),
            first=self._sanitize(new_events[0]),
        )
        self._write(path, old_events + new_events)

    def load_events(self, from_block: int, to_block: Optional[int] = None) -> List[Any]:
        """Events for from_block..to_block INCLUSIVE, in block order."""
        from_block = _require_int(from_block, field="from_block")
        to_block = from_block if to_block is None else _require_int(to_block, field="to_block")

        out: List[Any] = []
        # walk the files on disk, not the numeric range: ranges can be huge
        for bnum in self._event_block_numbers():
            if bnum < from_block or bnum > to_block:
                continue
            path = self.paths.event_path(bnum)
            log_event(self.log, "events_load", block_number=bnum, path=str(path))
            out.extend(self._read_event_list(path, block_number=bnum))
        return out
