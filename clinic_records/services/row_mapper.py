from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date

from ..models.batch_report import RowRejection
from ..models.config_models import ColumnMapping, ImportConfig
from ..models.patient import Gender, PatientRecord
from .dates import collapse_whitespace, normalize_date

"""Raw row -> PatientRecord mapping.

Policy:
- blank rows (no name, registration number or passport number) are skipped
  silently by the caller, see is_blank_row()
- an empty name after trimming is the only rejection reason
- gender, age and date of birth never reject a row; unreadable values fall
  back to the configured default gender / None
"""

__all__ = [
    "MISSING_NAME_REASON",
    "cell",
    "is_blank_row",
    "map_row",
    "parse_age",
    "parse_gender",
]

MISSING_NAME_REASON = "missing name"
MAX_AGE = 150

_LEADING_INT = re.compile(r"^\s*(\d+)")
_SHORT_CODES = {"m": Gender.MALE, "f": Gender.FEMALE}


def _index_headers(raw: Mapping[str, object]) -> dict[str, object]:
    # Exports frequently carry stray spaces around header names.
    return {str(k).strip(): v for k, v in raw.items()}


def cell(raw: Mapping[str, object], column: str) -> str:
    """Trimmed, whitespace-collapsed cell value; "" when absent or None."""
    value = raw.get(column)
    if value is None:
        value = _index_headers(raw).get(column)
    return collapse_whitespace(value) if value is not None else ""


def is_blank_row(raw: Mapping[str, object], columns: ColumnMapping | None = None) -> bool:
    cols = columns or ColumnMapping()
    return not (
        cell(raw, cols.name)
        or cell(raw, cols.registration_number)
        or cell(raw, cols.passport_number)
    )


def parse_gender(value: str, default: Gender = Gender.FEMALE) -> Gender:
    """Substring match, "female" checked before "male"; bare M/F codes accepted."""
    v = (value or "").strip().lower()
    if not v:
        return default
    if "female" in v:
        return Gender.FEMALE
    if "male" in v:
        return Gender.MALE
    return _SHORT_CODES.get(v, default)


def parse_age(value: str) -> int | None:
    m = _LEADING_INT.match(value or "")
    if not m:
        return None
    age = int(m.group(1))
    if age > MAX_AGE:
        return None
    return age


def _parse_dob(value: str, config: ImportConfig, today: date | None) -> date | None:
    if not value:
        return None
    placeholders = config.dob_placeholder_keys
    if value.upper() in placeholders:
        return None
    return normalize_date(value, placeholders=frozenset(placeholders), today=today)


def map_row(
    raw: Mapping[str, object],
    row_number: int,
    config: ImportConfig | None = None,
    *,
    today: date | None = None,
) -> PatientRecord | RowRejection:
    """Map one raw row to a PatientRecord, or a RowRejection when the name is missing."""
    cfg = config or ImportConfig()
    cols = cfg.columns

    name = cell(raw, cols.name)
    if not name:
        return RowRejection(row_number=row_number, reason=MISSING_NAME_REASON)

    return PatientRecord(
        name=name,
        gender=parse_gender(cell(raw, cols.gender), cfg.default_gender),
        age=parse_age(cell(raw, cols.age)),
        date_of_birth=_parse_dob(cell(raw, cols.date_of_birth), cfg, today),
        registration_number=cell(raw, cols.registration_number),
        passport_number=cell(raw, cols.passport_number),
        phone1=cell(raw, cols.phone1),
        phone2=cell(raw, cols.phone2),
        insurance_agent=cell(raw, cols.insurance_agent),
        insurance_plan=cell(raw, cols.insurance_plan),
    )
