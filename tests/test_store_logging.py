from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from conftest import make_event
from sidechain.storage.file_store import FileStore
from sidechain.storage.store_logging import log_event, truncate


def test_truncate_short_text_is_unchanged() -> None:
    assert truncate("abc", 10) == "abc"


def test_truncate_long_text_reports_total_length() -> None:
    out = truncate("x" * 25, 10)
    assert out == "x" * 10 + "... TOTAL LENGTH: 25"


def test_log_event_is_one_json_object(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("sidechain.test")
    with caplog.at_level(logging.INFO, logger="sidechain.test"):
        log_event(logger, "thing_happened", block_number=4, path="/x")

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "thing_happened"
    assert payload["block_number"] == 4
    assert isinstance(payload["ts_ms"], int)


def test_log_event_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("sidechain.test.quiet")
    with caplog.at_level(logging.WARNING, logger="sidechain.test.quiet"):
        log_event(logger, "chatty", level=logging.DEBUG)
    assert caplog.records == []


def test_event_log_lines_are_truncated(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    st = FileStore(tmp_path / "store", max_log_len=40, fsync=False)
    many = ["0x%040x" % i for i in range(50)]

    with caplog.at_level(logging.INFO, logger="sidechain.storage"):
        st.save_events(3, make_event(3, "Join", *many))

    saves = [json.loads(r.getMessage()) for r in caplog.records if '"events_save"' in r.getMessage()]
    assert len(saves) == 1
    assert "... TOTAL LENGTH: " in saves[0]["first"]
    assert saves[0]["count"] == 1
    assert saves[0]["appended_after"] == 0
