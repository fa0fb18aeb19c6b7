from __future__ import annotations

import re

import pytest

from clinic_records.models.batch_report import BatchReport, RowRejection
from clinic_records.services.summary import render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY rows=(\d+) success=(\d+) failed=(\d+) "
    r"skipped_blank=(\d+) skipped_duplicate=(\d+) elapsed_sec=(\d+(?:\.\d+)?)$"
)


def test_render_all_counts():
    report = BatchReport(
        successful=2,
        failed=1,
        errors=(RowRejection(3, "missing name").message(),),
        skipped_blank=1,
        skipped_duplicate=1,
        total_rows=5,
    )
    line = render_summary_line(report, 0.84)
    assert line == (
        "SUMMARY rows=5 success=2 failed=1 skipped_blank=1 "
        "skipped_duplicate=1 elapsed_sec=0.84"
    )
    assert SUMMARY_PATTERN.match(line)


def test_render_empty_batch():
    line = render_summary_line(BatchReport(successful=0, failed=0), 0)
    assert line == "SUMMARY rows=0 success=0 failed=0 skipped_blank=0 skipped_duplicate=0 elapsed_sec=0"


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (2.0, "2"),
        (1.5, "1.5"),
        (12.346, "12.35"),
        (0.001234, "0.001234"),
        (0.0000004, "0"),
    ],
)
def test_elapsed_formatting(elapsed: float, expected: str):
    line = render_summary_line(BatchReport(successful=1, failed=0, total_rows=1), elapsed)
    assert line.endswith(f"elapsed_sec={expected}")
    assert SUMMARY_PATTERN.match(line)
