from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class StoreError(Exception):
    """Base error for the side-chain file store."""

    code: str
    reason: str
    path: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        if self.path is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.path}"


class FileSystemError(StoreError):
    """Directory creation or file I/O failed (permissions, OS faults)."""


class BlockNotFoundError(FileSystemError):
    """Strict read of a snapshot file that does not exist."""


class ValidationError(StoreError):
    """Caller handed the store something it refuses to persist."""


class ParseError(StoreError):
    """A persisted file exists but its content is not the expected JSON."""


class StateCorruptedError(ParseError):
    """The operator-state document exists but cannot be decoded."""
