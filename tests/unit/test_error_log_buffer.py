from __future__ import annotations

import json
from pathlib import Path

from clinic_records.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "source", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        source="patients.csv",
        row=10,
        error_type="PERSISTENCE_ERROR",
        message="Row 10: failed to create patient 'Jane': timeout",
    )
    data = json.loads(rec.to_json_line())
    assert data["source"] == "patients.csv"
    assert data["row"] == 10
    assert data["error_type"] == "PERSISTENCE_ERROR"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("ผู้ป่วย.csv", -1, "READ_ERROR", "ไม่พบไฟล์")
    assert "ไม่พบไฟล์" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("p.csv", 1, "MISSING_NAME", "Row 1: missing name"))
    buf.append(ErrorRecord.create("p.csv", 2, "PERSISTENCE_ERROR", "Row 2: failed"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("./logs")
    assert path.name.startswith("import-errors-")

    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(buf) == 0


def test_error_log_buffer_empty_flush_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_error_log_buffer_multiple_flushes_append(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("p.csv", 1, "MISSING_NAME", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("p.csv", 2, "MISSING_NAME", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
