# Shared pytest fixtures
from __future__ import annotations

import csv
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from clinic_records.db.memory_store import InMemoryPatientStore
from clinic_records.logging.init import reset_logging
from clinic_records.models.patient import PatientRecord

PATIENT_HEADERS = [
    "Name",
    "Gender",
    "Age",
    "DateOfBirth",
    "RegistrationNumber",
    "PassportNumber",
    "PrimaryPhone",
    "SecondaryPhone",
    "InsuranceAgent",
    "InsurancePlan",
]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_file: ./data/patients.csv
default_gender: FEMALE
dob_placeholders: ["NEW", "NEW print", "old"]
max_errors: null
database:
  host: localhost
  port: 5432
  user: clinic
  password: secret
  database: clinic
  patients_table: patients
  appointments_table: appointments
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Write rows (dicts keyed by PATIENT_HEADERS) to data/<name>."""
    def _write(rows: list[dict[str, str]], name: str = "patients.csv", headers: list[str] | None = None) -> Path:
        path = temp_workdir / "data" / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=headers or PATIENT_HEADERS)
            writer.writeheader()
            for r in rows:
                writer.writerow(r)
        return path
    return _write


class FlakySink(InMemoryPatientStore):
    """In-memory sink that raises for chosen patient names."""

    def __init__(self, fail_names: set[str] | None = None, exc: Exception | None = None) -> None:
        super().__init__()
        self.fail_names = fail_names or set()
        self.exc = exc or RuntimeError("document store unavailable")
        self.calls: list[PatientRecord] = []

    def create(self, record: PatientRecord) -> str:
        self.calls.append(record)
        if record.name in self.fail_names:
            raise self.exc
        return super().create(record)


@pytest.fixture()
def memory_sink() -> InMemoryPatientStore:
    return InMemoryPatientStore()


@pytest.fixture()
def flaky_sink_factory() -> Callable[..., FlakySink]:
    return FlakySink
