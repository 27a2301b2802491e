from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from conftest import make_block
from sidechain.storage.errors import BlockNotFoundError, FileSystemError, ParseError, ValidationError
from sidechain.storage.file_store import FileStore


def test_save_then_load_block_roundtrips(store: FileStore) -> None:
    block = make_block(42, ("0xaaa", "100"), ("0xbbb", "250"))
    block["extra"] = {"nested": [1, 2.5, None, True]}

    store.save_block(block)

    assert store.load_block(42) == block
    assert store.block_exists(42)
    assert not store.block_exists(43)


def test_latest_pointer_tracks_highest_block_not_save_order(store: FileStore) -> None:
    for n in (5, 3, 9, 1):
        store.save_block(make_block(n, ("0xaaa", str(n))))

    latest = store.get_latest_block()
    assert latest is not None
    assert latest["blockNumber"] == 9
    assert store.latest_block_number() == 9


def test_latest_pointer_advances_on_tie_and_rereads_overwritten_block(store: FileStore) -> None:
    store.save_block(make_block(7, ("0xaaa", "1")))
    store.save_block(make_block(7, ("0xaaa", "2")))

    latest = store.get_latest_block()
    assert latest is not None
    assert latest["members"][0]["earnings"] == "2"


def test_latest_pointer_is_a_reference_not_a_copy(store: FileStore) -> None:
    store.save_block(make_block(12, ("0xaaa", "1")))

    pointer = json.loads(store.paths.latest_path.read_text(encoding="utf-8"))
    assert pointer == {"blockNumber": 12, "path": "12.json"}


def test_has_latest_block_flips_after_first_save(store: FileStore) -> None:
    assert store.has_latest_block() is False
    assert store.get_latest_block() is None
    assert store.latest_block_number() is None

    store.save_block(make_block(1))

    assert store.has_latest_block() is True


def test_overwrite_is_a_warning_not_an_error(store: FileStore, caplog: pytest.LogCaptureFixture) -> None:
    store.save_block(make_block(3, ("0xaaa", "1")))

    with caplog.at_level(logging.WARNING, logger="sidechain.storage"):
        store.save_block(make_block(3, ("0xaaa", "9")))

    overwrites = [r for r in caplog.records if r.levelno == logging.WARNING and "block_overwrite" in r.getMessage()]
    assert len(overwrites) == 1
    assert store.load_block(3)["members"][0]["earnings"] == "9"


def test_first_save_emits_no_overwrite_warning(store: FileStore, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="sidechain.storage"):
        store.save_block(make_block(3))
    assert not [r for r in caplog.records if "block_overwrite" in r.getMessage()]


@pytest.mark.parametrize(
    "bad",
    [
        None,
        [],
        {},
        {"members": []},
        {"blockNumber": 0},
        {"blockNumber": -4},
        {"blockNumber": "12"},
        {"blockNumber": 3.0},
        {"blockNumber": True},
    ],
)
def test_save_block_rejects_missing_or_invalid_block_number(store: FileStore, bad) -> None:
    with pytest.raises(ValidationError):
        store.save_block(bad)
    assert store.list_block_numbers() == []
    assert not store.has_latest_block()


def test_save_block_rejects_non_json_values(store: FileStore) -> None:
    block = make_block(4)
    block["members"] = [{"address": "0xaaa", "earnings": object()}]

    with pytest.raises(ValidationError):
        store.save_block(block)
    assert not store.has_latest_block()


def test_load_block_missing_is_strict(store: FileStore) -> None:
    with pytest.raises(BlockNotFoundError) as ei:
        store.load_block(77)
    assert isinstance(ei.value, FileSystemError)


def test_load_block_unparsable_raises_parse_error(store: FileStore) -> None:
    store.paths.block_path(8).write_text("{not json", encoding="utf-8")

    with pytest.raises(ParseError):
        store.load_block(8)


def test_load_block_with_invalid_utf8_raises_parse_error(store: FileStore) -> None:
    store.paths.block_path(5).write_bytes(b"{\xff}")

    with pytest.raises(ParseError) as ei:
        store.load_block(5)
    assert ei.value.code == "bad_encoding"


def test_latest_block_with_invalid_utf8_raises_parse_error(store: FileStore) -> None:
    store.save_block(make_block(5))
    store.paths.block_path(5).write_bytes(b'{"blockNumber": 5, "x": "\xff"}')

    with pytest.raises(ParseError):
        store.get_latest_block()


def test_list_block_numbers_sorts_numerically_and_limits(store: FileStore) -> None:
    for n in (2, 10, 3):
        store.save_block(make_block(n))

    assert store.list_block_numbers() == [2, 3, 10]
    assert store.list_block_numbers(2) == [3, 10]
    assert store.list_block_numbers(10) == [2, 3, 10]
    assert store.list_block_numbers(0) == [2, 3, 10]


def test_list_block_numbers_ignores_non_snapshot_files(store: FileStore) -> None:
    store.save_block(make_block(5))
    blocks_dir = store.paths.blocks_dir
    (blocks_dir / "notes.txt").write_text("x", encoding="utf-8")
    (blocks_dir / "abc.json").write_text("{}", encoding="utf-8")
    (blocks_dir / "6.json.1234.tmp").write_text("{}", encoding="utf-8")
    (blocks_dir / ".json").write_text("{}", encoding="utf-8")

    assert store.paths.latest_path.exists()
    assert store.list_block_numbers() == [5]


def test_list_block_numbers_rejects_negative_limit(store: FileStore) -> None:
    with pytest.raises(ValidationError):
        store.list_block_numbers(-1)


def test_latest_pointer_survives_reopen(tmp_path: Path) -> None:
    root = tmp_path / "store"
    first = FileStore(root, fsync=False)
    first.save_block(make_block(20))
    first.save_block(make_block(11))

    reopened = FileStore(root, fsync=False)
    reopened.save_block(make_block(15))

    assert reopened.latest_block_number() == 20
    assert reopened.list_block_numbers() == [11, 15, 20]


def test_corrupt_pointer_is_a_parse_error(store: FileStore) -> None:
    store.save_block(make_block(2))
    store.paths.latest_path.write_text('{"blockNumber": "two"}', encoding="utf-8")

    with pytest.raises(ParseError):
        store.get_latest_block()
    with pytest.raises(ParseError):
        store.save_block(make_block(3))
    assert not store.block_exists(3)


def test_pointer_to_vanished_block_is_not_silently_none(store: FileStore) -> None:
    store.save_block(make_block(2))
    store.paths.block_path(2).unlink()

    with pytest.raises(BlockNotFoundError):
        store.get_latest_block()


def test_find_member_in_latest_and_specific_block(store: FileStore) -> None:
    store.save_block(make_block(1, ("0xAbC", "10")))
    store.save_block(make_block(2, ("0xabc", "25"), ("0xdef", "5")))

    assert store.find_member("0xABC") == {"address": "0xabc", "earnings": "25"}
    assert store.find_member("0xabc", 1) == {"address": "0xAbC", "earnings": "10"}
    assert store.find_member("0x999") is None


def test_find_member_without_blocks_is_none(store: FileStore) -> None:
    assert store.find_member("0xabc") is None


def test_writes_leave_no_temp_files(store: FileStore) -> None:
    for n in (1, 2, 3):
        store.save_block(make_block(n))

    leftovers = [p.name for p in store.paths.blocks_dir.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []
