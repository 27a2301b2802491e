from __future__ import annotations

import sys
from pathlib import Path

# Ensure local "src/" takes precedence over any globally-installed "sidechain" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

import pytest

from sidechain.storage.file_store import FileStore


@pytest.fixture
def store(tmp_path: Path) -> FileStore:
    return FileStore(tmp_path / "store", fsync=False)


def make_block(block_number: int, *members: tuple[str, str], timestamp: int = 1_600_000_000) -> dict:
    """Snapshot dict in the on-disk shape; members are (address, earnings) pairs."""
    ms = [{"address": a, "earnings": e} for a, e in members]
    return {
        "blockNumber": block_number,
        "members": ms,
        "timestamp": timestamp,
        "totalEarnings": str(sum(int(e) for _, e in members)),
    }


def make_event(block_number: int, kind: str, *addresses: str, tx_index: int = 1_000_000) -> dict:
    return {
        "blockNumber": block_number,
        "transactionIndex": tx_index,
        "event": kind,
        "addressList": list(addresses),
    }
