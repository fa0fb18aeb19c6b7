from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any

__all__ = [
    "AdmissionType",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
]


class AppointmentType(IntEnum):
    MEDICAL_CHECKUP = 1
    CONSULTATION = 2

    @property
    def label(self) -> str:
        return {
            AppointmentType.MEDICAL_CHECKUP: "Medical Checkup",
            AppointmentType.CONSULTATION: "Consultation",
        }[self]


class AdmissionType(IntEnum):
    WALK_IN = 1
    DAY_CARE = 2


class AppointmentStatus(IntEnum):
    PENDING = 0
    CONFIRMED = 1
    CANCELLED = 2
    COMPLETED = 3


@dataclass(frozen=True)
class Appointment:
    """A scheduled visit for one patient (patient_id = store id of the patient)."""
    patient_id: str
    type: AppointmentType
    admission_type: AdmissionType
    datetime: datetime
    doctor: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING

    def to_document(self) -> dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "type": int(self.type),
            "admission_type": int(self.admission_type),
            "datetime": self.datetime.isoformat(),
            "doctor": self.doctor,
            "status": int(self.status),
        }

    @staticmethod
    def from_document(doc: dict[str, Any]) -> Appointment:
        when = doc["datetime"]
        if isinstance(when, str):
            when = datetime.fromisoformat(when)
        return Appointment(
            patient_id=doc["patient_id"],
            type=AppointmentType(int(doc["type"])),
            admission_type=AdmissionType(int(doc["admission_type"])),
            datetime=when,
            doctor=doc.get("doctor") or "",
            status=AppointmentStatus(int(doc.get("status") or 0)),
        )
