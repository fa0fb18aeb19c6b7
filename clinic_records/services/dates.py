from __future__ import annotations

import calendar
import logging
import re
import warnings
from datetime import date

import pandas as pd

"""Free-text date normalization for imported patient rows.

Legacy exports carry dates of birth in several ad-hoc conventions
("23 Jul 1951", "12-May-1950", "26Feb1963", "13July1974", "05-061972", ...).
normalize_date() resolves them to a calendar date or returns None; it never
raises, so a malformed date never costs the rest of a patient row.

Patterns are tried in a fixed order and the first *structural* match decides
the outcome: a string that looks like pattern 1 but carries an impossible day
is None, it is not retried against the later patterns.
"""

__all__ = [
    "DEFAULT_PLACEHOLDERS",
    "collapse_whitespace",
    "normalize_date",
]

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDERS = frozenset({"NEW", "NEW PRINT", "OLD"})

_WS = re.compile(r"\s+")

# 1. DD-MMYY / DD-MMYYY / DD-MMYYYY
_DAY_DASH_MONTH_YEAR = re.compile(r"^(\d{2})-(\d{2})(\d{2,4})$")
# 2. DD Month YYYY
_DAY_SPACE_NAME_YEAR = re.compile(r"^(\d{1,2}) ([A-Za-z]{3,})\.? (\d{4})$")
# 3. DD-Month-YYYY
_DAY_DASH_NAME_YEAR = re.compile(r"^(\d{1,2})-([A-Za-z]{3,})-(\d{4})$")
# 4. DDMonYYYY (exactly three letters)
_COMPACT_SHORT_NAME = re.compile(r"^\d{2}[A-Za-z]{3}\d{4}$")
# 5. DMonthYYYY / DDMonthYYYY (four or more letters)
_COMPACT_LONG_NAME = re.compile(r"^(\d{1,2})([A-Za-z]{4,})(\d{4})$")


def collapse_whitespace(raw: str | None) -> str:
    """Trim and collapse internal whitespace."""
    if raw is None:
        return ""
    return _WS.sub(" ", str(raw)).strip()


def _expand_year(fragment: str, today: date) -> int:
    if len(fragment) == 4:
        return int(fragment)
    yy = int(fragment[-2:])
    century = today.year - today.year % 100
    if yy > today.year % 100:
        return century - 100 + yy
    return century + yy


def _build_date(year: int, month: int, day: int) -> date | None:
    if not 1 <= day <= 31:
        return None
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return None
    if day > calendar.monthrange(year, month)[1]:
        return None
    return date(year, month, day)


def _generic_parse(text: str) -> date | None:
    """Free-text parse via pandas; None for anything it cannot read.

    The year pandas settles on must appear in the text as four digits, so
    year-less input ("July", "Mar 15") is None rather than a filled-in year.
    """
    if not text:
        return None
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    for w in caught:
        logger.debug("date=%r %s", text, w.message)
    if ts is None or pd.isna(ts):
        return None
    if f"{ts.year:04d}" not in text:
        logger.debug("date=%r no explicit year -> None", text)
        return None
    return _build_date(ts.year, ts.month, ts.day)


def normalize_date(
    raw: str | None,
    *,
    placeholders: frozenset[str] | set[str] = DEFAULT_PLACEHOLDERS,
    today: date | None = None,
) -> date | None:
    """Parse a free-text date of birth into a date, or None.

    Args:
        raw: Source cell text (any whitespace is tolerated)
        placeholders: Upper-cased sentinel values meaning "no date"
        today: Reference date for two-digit year expansion (defaults to today)
    """
    text = collapse_whitespace(raw)
    if not text or text.upper() in placeholders:
        return None
    ref = today or date.today()

    m = _DAY_DASH_MONTH_YEAR.match(text)
    if m:
        day, month, year_frag = int(m.group(1)), int(m.group(2)), m.group(3)
        if not 1 <= month <= 12:
            logger.debug("date=%r month=%d out of range -> January", text, month)
            month = 1
        return _build_date(_expand_year(year_frag, ref), month, day)

    m = _DAY_SPACE_NAME_YEAR.match(text)
    if m:
        return _generic_parse(f"{m.group(2)} {m.group(1)}, {m.group(3)}")

    m = _DAY_DASH_NAME_YEAR.match(text)
    if m:
        return _generic_parse(f"{m.group(2)} {m.group(1)}, {m.group(3)}")

    if _COMPACT_SHORT_NAME.match(text):
        day, month_name, year = text[:2], text[2:-4], text[-4:]
        return _generic_parse(f"{month_name} {day}, {year}")

    m = _COMPACT_LONG_NAME.match(text)
    if m:
        return _generic_parse(f"{m.group(2)} {m.group(1)}, {m.group(3)}")

    return _generic_parse(text)
