from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for structured import error logging.

One record per failed row, serialized as a JSON Lines entry with a fixed key
set. `row` is the 1-based row number; -1 marks a file-level error where no
row applies (e.g. the input could not be read at all).
"""

__all__ = [
    "ErrorRecord",
    "MISSING_NAME",
    "PERSISTENCE_ERROR",
    "READ_ERROR",
    "UNEXPECTED_ERROR",
]

MISSING_NAME = "MISSING_NAME"
PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
READ_ERROR = "READ_ERROR"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Input file name (or "<batch>" for in-process batches)
        row: Row number (1-based). -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable reason, as reported in BatchReport.errors
    """
    timestamp: str
    source: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
