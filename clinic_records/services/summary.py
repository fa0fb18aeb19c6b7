from __future__ import annotations

from ..models.batch_report import BatchReport

"""SUMMARY line rendering for import runs."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(report: BatchReport, elapsed_seconds: float) -> str:
    """Render the SUMMARY line for one batch.

    Format:
    SUMMARY rows={total} success={successful} failed={failed}
    skipped_blank={blank} skipped_duplicate={dup} elapsed_sec={elapsed}

    Examples:
        >>> render_summary_line(BatchReport(successful=2, failed=1, total_rows=4, skipped_blank=1), 1.5)
        'SUMMARY rows=4 success=2 failed=1 skipped_blank=1 skipped_duplicate=0 elapsed_sec=1.5'
    """
    return (
        f"SUMMARY rows={report.total_rows} "
        f"success={report.successful} "
        f"failed={report.failed} "
        f"skipped_blank={report.skipped_blank} "
        f"skipped_duplicate={report.skipped_duplicate} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )
