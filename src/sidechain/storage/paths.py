from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from sidechain.storage.errors import FileSystemError

PathLike = Union[str, Path]

BLOCKS_DIRNAME = "blocks"
EVENTS_DIRNAME = "events"
STATE_FILENAME = "state.json"
LATEST_FILENAME = "latest.json"

# Only "<digits>.json" names are snapshots; latest.json and *.tmp are not.
BLOCK_FILE_RE = re.compile(r"^(\d+)\.json$")


@dataclass(frozen=True)
class StorePaths:
    """Maps a store root and block numbers to file paths.

    Layout:
      <root>/state.json
      <root>/blocks/<blockNumber>.json
      <root>/blocks/latest.json
      <root>/events/<blockNumber>.json
    """

    root: Path

    @classmethod
    def at(cls, root: PathLike) -> "StorePaths":
        return cls(root=Path(root).expanduser())

    @property
    def blocks_dir(self) -> Path:
        return self.root / BLOCKS_DIRNAME

    @property
    def events_dir(self) -> Path:
        return self.root / EVENTS_DIRNAME

    @property
    def state_path(self) -> Path:
        return self.root / STATE_FILENAME

    @property
    def latest_path(self) -> Path:
        return self.blocks_dir / LATEST_FILENAME

    def block_path(self, block_number: int) -> Path:
        return self.blocks_dir / f"{int(block_number)}.json"

    def event_path(self, block_number: int) -> Path:
        return self.events_dir / f"{int(block_number)}.json"

    def ensure(self) -> None:
        """Create root, blocks/ and events/. Safe to call repeatedly."""
        for d in (self.root, self.blocks_dir, self.events_dir):
            try:
                d.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileSystemError("mkdir_failed", str(e), str(d)) from e


def block_number_from_filename(name: str) -> Optional[int]:
    m = BLOCK_FILE_RE.match(name)
    if m is None:
        return None
    return int(m.group(1))
