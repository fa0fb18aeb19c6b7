from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from clinic_records.db.memory_store import InMemoryAppointmentStore, InMemoryPatientStore
from clinic_records.models.appointment import AdmissionType, Appointment, AppointmentType
from clinic_records.models.patient import PatientRecord
from clinic_records.services.dashboard import build_dashboard, count_upcoming_checkups, end_of_week

# Wednesday
NOW = datetime(2026, 10, 21, 10, 0)


def _appt(when: datetime, kind: AppointmentType = AppointmentType.MEDICAL_CHECKUP) -> Appointment:
    return Appointment(patient_id="p", type=kind, admission_type=AdmissionType.WALK_IN, datetime=when)


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2026, 10, 21, 10, 0), datetime(2026, 10, 25, 23, 59, 59, 999999)),  # Wed -> Sun
        (datetime(2026, 10, 19, 0, 0), datetime(2026, 10, 25, 23, 59, 59, 999999)),   # Mon -> Sun
        (datetime(2026, 10, 25, 12, 0), datetime(2026, 11, 1, 23, 59, 59, 999999)),   # Sun -> next Sun
    ],
)
def test_end_of_week(now, expected):
    assert end_of_week(now) == expected


def test_count_upcoming_checkups_window():
    appts = [
        ("past", _appt(NOW - timedelta(hours=1))),
        ("now", _appt(NOW)),
        ("soon", _appt(NOW + timedelta(days=1))),
        ("sunday-late", _appt(datetime(2026, 10, 25, 23, 0))),
        ("next-week", _appt(datetime(2026, 10, 26, 8, 0))),
        ("consult", _appt(NOW + timedelta(days=1), AppointmentType.CONSULTATION)),
    ]
    assert count_upcoming_checkups(appts, NOW) == 2


def test_count_upcoming_checkups_aware_datetimes():
    aware_now = NOW.replace(tzinfo=timezone.utc)
    appts = [("a", _appt((NOW + timedelta(hours=2)).replace(tzinfo=timezone.utc)))]
    assert count_upcoming_checkups(appts, aware_now) == 1


def test_build_dashboard():
    patients = InMemoryPatientStore()
    for i in range(6):
        patients.create(PatientRecord(name=f"P{i}"))
    appointments = InMemoryAppointmentStore()
    appointments.create(_appt(NOW + timedelta(days=2)))
    appointments.create(_appt(NOW + timedelta(days=2), AppointmentType.CONSULTATION))

    counts = build_dashboard(patients, appointments, now=NOW)

    assert counts.total_patients == 6
    assert counts.total_appointments == 2
    assert counts.upcoming_checkups == 1
    assert [p.name for _, p in counts.recent_patients] == ["P5", "P4", "P3", "P2"]
    assert len(counts.recent_appointments) == 2
