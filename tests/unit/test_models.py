from __future__ import annotations

import dataclasses
from datetime import date, datetime

import pytest

from clinic_records.models import (
    AdmissionType,
    Appointment,
    AppointmentStatus,
    AppointmentType,
    BatchReport,
    Gender,
    ImportConfig,
    PatientRecord,
    RowRejection,
)


def test_patient_document_shape():
    rec = PatientRecord(
        name="Jane Doe",
        gender=Gender.FEMALE,
        age=72,
        date_of_birth=date(1951, 7, 23),
        registration_number="RN-001",
        phone1="0812345678",
    )
    doc = rec.to_document()
    assert doc["rn"] == "RN-001"
    assert doc["gender"] == 2
    assert doc["date_of_birth"] == "1951-07-23"
    assert doc["phone2"] == ""
    assert PatientRecord.from_document(doc) == rec


def test_patient_from_document_accepts_date_and_missing_fields():
    rec = PatientRecord.from_document({"name": "A", "date_of_birth": date(2000, 1, 1), "gender": 1})
    assert rec.date_of_birth == date(2000, 1, 1)
    assert rec.gender == Gender.MALE
    assert rec.registration_number == ""

    rec = PatientRecord.from_document({"name": "B", "date_of_birth": None, "rn": None})
    assert rec.date_of_birth is None
    assert rec.gender == Gender.FEMALE
    assert rec.registration_number == ""


def test_patient_record_is_frozen():
    rec = PatientRecord(name="A")
    with pytest.raises(dataclasses.FrozenInstanceError):
        rec.name = "B"  # type: ignore[misc]


def test_appointment_document_round_trip():
    appt = Appointment(
        patient_id="p1",
        type=AppointmentType.CONSULTATION,
        admission_type=AdmissionType.WALK_IN,
        datetime=datetime(2026, 10, 22, 9, 30),
        doctor="Dr. Somchai",
        status=AppointmentStatus.CONFIRMED,
    )
    doc = appt.to_document()
    assert doc["datetime"] == "2026-10-22T09:30:00"
    assert doc["status"] == 1
    assert Appointment.from_document(doc) == appt
    assert AppointmentType.MEDICAL_CHECKUP.label == "Medical Checkup"


def test_row_rejection_message():
    assert RowRejection(4, "missing name").message() == "Row 4: missing name"


def test_batch_report_to_dict():
    ok = BatchReport(successful=3, failed=0, total_rows=3)
    assert ok.to_dict() == {"successful": 3, "failed": 0, "errors": None}
    assert ok.has_failures is False

    bad = BatchReport(successful=1, failed=1, errors=("Row 2: missing name",), total_rows=2)
    assert bad.to_dict() == {"successful": 1, "failed": 1, "errors": ["Row 2: missing name"]}
    assert bad.has_failures is True


def test_import_config_placeholder_keys_are_case_folded():
    cfg = ImportConfig(dob_placeholders=("new", "Old"))
    assert cfg.dob_placeholder_keys == {"NEW", "OLD"}
