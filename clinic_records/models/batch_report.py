from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Batch import result models.

BatchReport is created fresh per import call and is immutable once returned.
Only validation failures and persistence failures count toward `failed`;
blank rows and duplicate registration numbers are tracked separately for the
SUMMARY line and never touch `successful`/`failed`.
"""

__all__ = [
    "BatchReport",
    "RowRejection",
]


@dataclass(frozen=True)
class RowRejection:
    """A row the mapper refused (counted as failed)."""
    row_number: int  # 1-based data row
    reason: str

    def message(self) -> str:
        return f"Row {self.row_number}: {self.reason}"


@dataclass(frozen=True)
class BatchReport:
    successful: int
    failed: int
    errors: tuple[str, ...] = field(default_factory=tuple)  # one per failed row, in row order
    skipped_blank: int = 0
    skipped_duplicate: int = 0
    total_rows: int = 0

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> dict[str, Any]:
        """External result shape: {successful, failed, errors|None}."""
        return {
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors) if self.errors else None,
        }
