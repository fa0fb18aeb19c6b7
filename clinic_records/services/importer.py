from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from ..db.sink import PatientSink
from ..logging.error_log import ErrorLogBuffer
from ..models.batch_report import BatchReport, RowRejection
from ..models.config_models import ImportConfig
from ..models.error_record import MISSING_NAME, PERSISTENCE_ERROR, UNEXPECTED_ERROR, ErrorRecord
from .progress import ProgressTracker
from .row_mapper import cell, is_blank_row, map_row

"""Bulk patient import: dedup + batch control.

import_batch() walks the rows strictly in input order, one at a time:

    blank row                      -> skipped, not counted
    registration number seen       -> skipped, not counted (first one wins)
    missing name                   -> failed ("Row N: missing name")
    sink.create() raises anything  -> failed ("Row N: failed to create ...")
    otherwise                      -> successful

Rows are persisted independently: nothing is rolled back when a later row
fails, and no per-row exception escapes the loop. The only error raised to the
caller is BatchInputError, before any row is touched.

Dedup keys live only for the duration of one call. Records already in the
store are not consulted.
"""

__all__ = [
    "BatchInputError",
    "import_batch",
]

logger = logging.getLogger(__name__)


class BatchInputError(Exception):
    """The batch as a whole is malformed (not a sequence of row mappings)."""


def _materialize(rows: Iterable[Mapping[str, object]]) -> list[Mapping[str, object]]:
    if rows is None or isinstance(rows, (str, bytes, Mapping)):
        raise BatchInputError(f"expected a sequence of row mappings, got {type(rows).__name__}")
    try:
        materialized = list(rows)
    except TypeError as e:
        raise BatchInputError(f"rows are not iterable: {e}") from e
    for idx, row in enumerate(materialized, start=1):
        if not isinstance(row, Mapping):
            raise BatchInputError(f"row {idx} is not a mapping (got {type(row).__name__})")
    return materialized


def import_batch(
    rows: Iterable[Mapping[str, object]],
    sink: PatientSink,
    config: ImportConfig | None = None,
    *,
    source: str = "<batch>",
    error_log: ErrorLogBuffer | None = None,
    row_offset: int = 0,
    today: date | None = None,
    show_progress: bool = True,
) -> BatchReport:
    """Import raw patient rows into `sink`.

    Args:
        rows: Raw rows (column header -> cell text), in file order
        sink: Persistence boundary; create() returns an id or raises
        config: Column mapping, default gender, DOB placeholders, error cap
        source: Name recorded in ErrorRecord entries (usually the file name)
        error_log: Optional buffer receiving one ErrorRecord per failed row
        row_offset: Added to the 1-based row index in messages (e.g. 1 to
            report spreadsheet line numbers when line 1 is the header)
        today: Reference date for two-digit birth-year expansion
        show_progress: Show a tqdm bar when stdout is a TTY

    Raises:
        BatchInputError: `rows` is not a sequence of mappings
    """
    cfg = config or ImportConfig()
    batch = _materialize(rows)

    seen_keys: set[str] = set()
    successful = 0
    failed = 0
    skipped_blank = 0
    skipped_duplicate = 0
    errors: list[str] = []

    def record_failure(row_number: int, error_type: str, message: str) -> None:
        nonlocal failed
        failed += 1
        if cfg.max_errors is None or len(errors) < cfg.max_errors:
            errors.append(message)
        if error_log is not None:
            error_log.append(ErrorRecord.create(source=source, row=row_number, error_type=error_type, message=message))
        logger.debug("row=%d %s", row_number, message)

    with ProgressTracker(len(batch), enabled=show_progress) as progress:
        for idx, raw in enumerate(batch, start=1):
            row_number = idx + row_offset
            try:
                if is_blank_row(raw, cfg.columns):
                    skipped_blank += 1
                    continue

                rn = cell(raw, cfg.columns.registration_number)
                if rn and rn in seen_keys:
                    logger.debug("row=%d duplicate registration number %s skipped", row_number, rn)
                    skipped_duplicate += 1
                    continue

                mapped = map_row(raw, row_number, cfg, today=today)
                if isinstance(mapped, RowRejection):
                    record_failure(row_number, MISSING_NAME, mapped.message())
                    continue

                if mapped.registration_number:
                    seen_keys.add(mapped.registration_number)

                try:
                    record_id = sink.create(mapped)
                except Exception as e:
                    record_failure(
                        row_number,
                        PERSISTENCE_ERROR,
                        f"Row {row_number}: failed to create patient '{mapped.name}': {e}",
                    )
                    continue
                successful += 1
                logger.debug("row=%d created patient id=%s", row_number, record_id)
            except Exception as e:
                # mapping bugs on odd input must not abort the batch either
                record_failure(row_number, UNEXPECTED_ERROR, f"Row {row_number}: unexpected error: {e}")
            finally:
                progress.advance(success=successful, failed=failed)

    return BatchReport(
        successful=successful,
        failed=failed,
        errors=tuple(errors),
        skipped_blank=skipped_blank,
        skipped_duplicate=skipped_duplicate,
        total_rows=len(batch),
    )
