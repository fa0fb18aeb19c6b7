from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from clinic_records.tabular.reader import TabularReadError, read_header, read_rows


def _write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_read_csv_keeps_strings(tmp_path: Path):
    p = _write_text(
        tmp_path / "patients.csv",
        "Name, Age ,PrimaryPhone,DateOfBirth\n"
        "Jane,72,0812345678,23 Jul 1951\n"
        "Bob,,,\n",
    )
    rows = read_rows(p)
    assert rows == [
        {"Name": "Jane", "Age": "72", "PrimaryPhone": "0812345678", "DateOfBirth": "23 Jul 1951"},
        {"Name": "Bob", "Age": "", "PrimaryPhone": "", "DateOfBirth": ""},
    ]


def test_read_csv_drops_fully_empty_rows(tmp_path: Path):
    p = _write_text(tmp_path / "p.csv", "Name,Age\nA,1\n,\n\nB,2\n")
    assert [r["Name"] for r in read_rows(p)] == ["A", "B"]


def test_na_strings_become_empty_by_default(tmp_path: Path):
    p = _write_text(tmp_path / "p.csv", "Name,PassportNumber\nJane,NA\n")
    assert read_rows(p)[0]["PassportNumber"] == ""


def test_keep_na_strings_preserved(tmp_path: Path):
    p = _write_text(tmp_path / "p.csv", "Name,PassportNumber,Phone\nJane,NA,N/A\n")
    row = read_rows(p, keep_na_strings=["NA"])[0]
    assert row["PassportNumber"] == "NA"
    assert row["Phone"] == ""


def test_empty_and_header_only_files(tmp_path: Path):
    assert read_rows(_write_text(tmp_path / "empty.csv", "")) == []
    assert read_rows(_write_text(tmp_path / "header.csv", "Name,Age\n")) == []


def test_read_xlsx(tmp_path: Path):
    p = tmp_path / "patients.xlsx"
    df = pd.DataFrame(
        [["Jane", "Female", "23 Jul 1951"], ["Bob", "Male", None]],
        columns=["Name", "Gender", "DateOfBirth"],
    )
    df.to_excel(p, index=False, engine="openpyxl")
    rows = read_rows(p)
    assert rows[0] == {"Name": "Jane", "Gender": "Female", "DateOfBirth": "23 Jul 1951"}
    assert rows[1]["DateOfBirth"] == ""
    assert read_header(p) == ["Name", "Gender", "DateOfBirth"]


def test_unsupported_suffix(tmp_path: Path):
    p = _write_text(tmp_path / "patients.txt", "Name\nJane\n")
    with pytest.raises(TabularReadError, match="unsupported file type"):
        read_rows(p)
    with pytest.raises(TabularReadError, match="unsupported file type"):
        read_header(p)


def test_missing_file(tmp_path: Path):
    with pytest.raises(TabularReadError, match="file not found"):
        read_rows(tmp_path / "nope.csv")


def test_read_header_strips_cells(tmp_path: Path):
    p = _write_text(tmp_path / "p.csv", " Name ,Gender\nJane,F\n")
    assert read_header(p) == ["Name", "Gender"]
