from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from ..models.patient import PatientRecord
from ..services.dates import normalize_date

"""Store contracts shared by the in-memory and PostgreSQL backends.

The import pipeline only needs PatientSink.create(); the CLI and dashboard use
the full CRUD surface of the concrete stores (memory_store, postgres_store).
"""

__all__ = [
    "Page",
    "PatientFilters",
    "PatientSink",
    "RecordNotFoundError",
    "StoreError",
    "check_paging",
    "resolve_dob_filter",
]

T = TypeVar("T")


class StoreError(Exception):
    """Backend failure (connection lost, constraint violation, ...)."""


class RecordNotFoundError(StoreError):
    pass


class PatientSink(Protocol):
    def create(self, record: PatientRecord) -> str:
        """Persist one record and return its new id. Raises on failure."""
        ...


@dataclass(frozen=True)
class PatientFilters:
    """Patient list filters; empty values are ignored.

    search/rn/passport are substring matches on name, registration number and
    passport number. dob is free text resolved through the date normalizer and
    matched exactly; an unparseable dob filter is dropped.
    """
    search: str = ""
    rn: str = ""
    passport: str = ""
    dob: str = ""


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[tuple[str, T]] = field(default_factory=list)  # (id, record)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
        }


def check_paging(page: int, limit: int) -> int:
    """Validate page/limit and return the row offset."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return (page - 1) * limit


def resolve_dob_filter(filters: PatientFilters) -> str | None:
    """ISO date for the dob filter, or None when absent/unparseable."""
    if not filters.dob:
        return None
    dob = normalize_date(filters.dob)
    return dob.isoformat() if dob else None
