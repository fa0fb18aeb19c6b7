from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import Any

"""Patient domain model.

PatientRecord is the validated, import-ready shape of one patient row. The
stored document uses the short `rn` key for the registration number and an
ISO `YYYY-MM-DD` string for the date of birth.
"""

__all__ = [
    "Gender",
    "PatientRecord",
]


class Gender(IntEnum):
    """Stored gender codes."""
    MALE = 1
    FEMALE = 2
    OTHER = 3


@dataclass(frozen=True)
class PatientRecord:
    """Validated patient row ready for persistence.

    `name` is guaranteed non-empty by the row mapper. Every string field other
    than `name` defaults to "" when the source column is missing.
    """
    name: str
    gender: Gender = Gender.FEMALE
    age: int | None = None  # 0-150, None when unknown
    date_of_birth: date | None = None
    registration_number: str = ""  # intra-batch dedup key, may be empty
    passport_number: str = ""
    phone1: str = ""
    phone2: str = ""
    insurance_agent: str = ""
    insurance_plan: str = ""

    def to_document(self) -> dict[str, Any]:
        """Render the record in the stored document shape."""
        return {
            "name": self.name,
            "gender": int(self.gender),
            "age": self.age,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "rn": self.registration_number,
            "passport_number": self.passport_number,
            "phone1": self.phone1,
            "phone2": self.phone2,
            "insurance_agent": self.insurance_agent,
            "insurance_plan": self.insurance_plan,
        }

    @staticmethod
    def from_document(doc: dict[str, Any]) -> PatientRecord:
        """Inverse of to_document() (store rows / documents -> record)."""
        dob = doc.get("date_of_birth")
        if isinstance(dob, str) and dob:
            dob = date.fromisoformat(dob[:10])
        elif not isinstance(dob, date):
            dob = None
        return PatientRecord(
            name=doc["name"],
            gender=Gender(int(doc.get("gender") or Gender.FEMALE)),
            age=doc.get("age"),
            date_of_birth=dob,
            registration_number=doc.get("rn") or "",
            passport_number=doc.get("passport_number") or "",
            phone1=doc.get("phone1") or "",
            phone2=doc.get("phone2") or "",
            insurance_agent=doc.get("insurance_agent") or "",
            insurance_plan=doc.get("insurance_plan") or "",
        )
