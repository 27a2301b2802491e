# src/sidechain/storage/__init__.py
"""
Durable side-chain ledger storage.

One directory per store:
- blocks/<n>.json: immutable balance snapshots, one per root-chain block,
- blocks/latest.json: pointer record naming the highest committed snapshot,
- events/<n>.json: append-only join/part event lists,
- state.json: free-form operator state.

The ledger engine is the only writer; reporting tooling only reads.
"""

from sidechain.storage.errors import (
    BlockNotFoundError,
    FileSystemError,
    ParseError,
    StateCorruptedError,
    StoreError,
    ValidationError,
)
from sidechain.storage.file_store import FileStore

__all__ = [
    "BlockNotFoundError",
    "FileStore",
    "FileSystemError",
    "ParseError",
    "StateCorruptedError",
    "StoreError",
    "ValidationError",
]
