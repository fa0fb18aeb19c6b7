from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from ..models.appointment import Appointment, AppointmentType
from ..models.patient import PatientRecord

"""Dashboard counts.

Upcoming checkups are medical-checkup appointments strictly after `now` and no
later than the end of the current week: the coming Sunday at
23:59:59.999999. On a Sunday that is the following Sunday, seven days out.
"""

RECENT_PATIENTS = 4
RECENT_APPOINTMENTS = 5


@dataclass(frozen=True)
class DashboardCounts:
    total_patients: int
    total_appointments: int
    upcoming_checkups: int
    recent_patients: list[tuple[str, PatientRecord]] = field(default_factory=list)
    recent_appointments: list[tuple[str, Appointment]] = field(default_factory=list)


def end_of_week(now: datetime) -> datetime:
    # isoweekday(): Monday=1 .. Sunday=7, so Sunday maps to a full week ahead
    days_ahead = 7 - now.isoweekday() % 7
    end = now + timedelta(days=days_ahead)
    return end.replace(hour=23, minute=59, second=59, microsecond=999999)


def _comparable(when: datetime, now: datetime) -> datetime:
    # Stored datetimes may be aware (timestamptz) while `now` is naive or vice versa.
    if when.tzinfo is not None and now.tzinfo is None:
        return when.astimezone().replace(tzinfo=None)
    if when.tzinfo is None and now.tzinfo is not None:
        return when.replace(tzinfo=now.tzinfo)
    return when


def count_upcoming_checkups(appointments: list[tuple[str, Appointment]], now: datetime) -> int:
    limit = end_of_week(now)
    count = 0
    for _, appt in appointments:
        if appt.type != AppointmentType.MEDICAL_CHECKUP:
            continue
        when = _comparable(appt.datetime, now)
        if now < when <= limit:
            count += 1
    return count


def build_dashboard(patients: Any, appointments: Any, now: datetime | None = None) -> DashboardCounts:
    """Aggregate dashboard counts from a patient store and an appointment store."""
    current = now or datetime.now()
    return DashboardCounts(
        total_patients=patients.count(),
        total_appointments=appointments.count(),
        upcoming_checkups=count_upcoming_checkups(appointments.all(), current),
        recent_patients=patients.list(page=1, limit=RECENT_PATIENTS, newest_first=True).items,
        recent_appointments=appointments.list(page=1, limit=RECENT_APPOINTMENTS, newest_first=True).items,
    )
