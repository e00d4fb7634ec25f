from __future__ import annotations

import json
import logging
from pathlib import Path

from idcard_batch.models import ASSET_NOT_FOUND, BatchResult
from idcard_batch.report import format_summary, log_summary, write_report


def _result() -> BatchResult:
    result = BatchResult()
    result.record_success("101", Path("out/101.jpg"))
    result.record_skip("102", ASSET_NOT_FOUND)
    return result.finalize()


def test_summary_lists_every_skip() -> None:
    text = format_summary(_result(), "out")
    assert "Processed: 1" in text
    assert "Skipped: 1" in text
    assert "  - 102: asset not found" in text
    assert "Output folder: out" in text


def test_log_summary(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="idcard_batch.report"):
        log_summary(_result(), "out")
    assert "Processing complete" in caplog.text
    assert "102: asset not found" in caplog.text


def test_write_report(tmp_path) -> None:
    path = write_report(_result(), tmp_path / "reports" / "run.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["processed_count"] == 1
    assert data["failures"] == [{"identifier": "102", "reason": ASSET_NOT_FOUND}]
