from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

"""Tabular file reader (CSV / Excel -> raw rows).

The first line is the header row; each following line becomes one raw row
mapping header -> string value. Cells are never type-converted: dates, ages
and phone numbers stay strings so the row mapper sees exactly what the
export contained (leading zeros in phone numbers survive). Empty cells read
as "".
"""

SUPPORTED_SUFFIXES = {".csv", ".xlsx"}


class TabularReadError(Exception):
    """Raised when an input file cannot be read as a table."""


def _na_options(keep_na_strings: Iterable[str] | None) -> dict[str, object]:
    # pandas turns "NA", "N/A", "null", ... into NaN by default. Strings listed
    # in keep_na_strings are excluded from that set so they stay literal.
    if not keep_na_strings:
        return {"keep_default_na": True, "na_values": None}
    import pandas._libs.parsers as parsers

    custom_na = set(parsers.STR_NA_VALUES) - set(keep_na_strings)
    return {"keep_default_na": False, "na_values": sorted(custom_na)}


def _frame_to_rows(df: pd.DataFrame) -> list[dict[str, str]]:
    columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    rows: list[dict[str, str]] = []
    for raw in df.itertuples(index=False, name=None):
        values = ["" if v is None else str(v) for v in raw]
        if all(v.strip() == "" for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
    return rows


def read_rows(path: Path, keep_na_strings: Iterable[str] | None = None) -> list[dict[str, str]]:
    """Read a .csv or .xlsx file into raw rows.

    Parameters
    ----------
    path: input file
    keep_na_strings: strings pandas would normally read as NaN that must be
        kept as literal values (e.g. ['NA'] for a passport column)
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TabularReadError(f"unsupported file type '{path.suffix}' (expected .csv or .xlsx): {path}")
    if not path.exists():
        raise TabularReadError(f"file not found: {path}")

    na_opts = _na_options(keep_na_strings)
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, dtype=str, skip_blank_lines=True, **na_opts)
        else:
            df = pd.read_excel(path, dtype=str, engine="openpyxl", **na_opts)
    except pd.errors.EmptyDataError:
        return []
    except Exception as e:
        raise TabularReadError(f"failed to read {path.name}: {e}") from e
    return _frame_to_rows(df)


def read_header(path: Path) -> list[str]:
    """Return the stripped header cells of a file (used by `inspect`)."""
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TabularReadError(f"unsupported file type '{path.suffix}' (expected .csv or .xlsx): {path}")
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, dtype=str, nrows=0)
        else:
            df = pd.read_excel(path, dtype=str, nrows=0, engine="openpyxl")
    except pd.errors.EmptyDataError:
        return []
    except Exception as e:
        raise TabularReadError(f"failed to read {path.name}: {e}") from e
    return [str(c).strip() for c in df.columns]
