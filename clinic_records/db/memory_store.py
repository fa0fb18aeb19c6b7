from __future__ import annotations

import uuid

from ..models.appointment import Appointment
from ..models.patient import PatientRecord
from .sink import Page, PatientFilters, RecordNotFoundError, check_paging, resolve_dob_filter

"""In-memory stores.

Used for dry runs (`--dry-run` / DISABLE_DB_CONNECT=1) and as the fake
backend in tests. Records keep insertion order; ids are uuid4 strings.
"""

__all__ = [
    "InMemoryAppointmentStore",
    "InMemoryPatientStore",
]


class InMemoryPatientStore:
    def __init__(self) -> None:
        self._records: dict[str, PatientRecord] = {}

    def create(self, record: PatientRecord) -> str:
        record_id = str(uuid.uuid4())
        self._records[record_id] = record
        return record_id

    def get(self, record_id: str) -> PatientRecord:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"patient not found: {record_id}") from None

    def update(self, record_id: str, record: PatientRecord) -> None:
        if record_id not in self._records:
            raise RecordNotFoundError(f"patient not found: {record_id}")
        self._records[record_id] = record

    def delete(self, record_id: str) -> None:
        if self._records.pop(record_id, None) is None:
            raise RecordNotFoundError(f"patient not found: {record_id}")

    def count(self) -> int:
        return len(self._records)

    def list(
        self,
        filters: PatientFilters | None = None,
        page: int = 1,
        limit: int = 10,
        *,
        newest_first: bool = False,
    ) -> Page[PatientRecord]:
        offset = check_paging(page, limit)
        f = filters or PatientFilters()
        dob = resolve_dob_filter(f)

        matched = []
        for record_id, rec in self._records.items():
            if f.search and f.search not in rec.name:
                continue
            if f.rn and f.rn not in rec.registration_number:
                continue
            if f.passport and f.passport not in rec.passport_number:
                continue
            if dob and (rec.date_of_birth is None or rec.date_of_birth.isoformat() != dob):
                continue
            matched.append((record_id, rec))
        if newest_first:
            matched.reverse()
        return Page(items=matched[offset:offset + limit], total=len(matched), page=page, limit=limit)


class InMemoryAppointmentStore:
    def __init__(self) -> None:
        self._records: dict[str, Appointment] = {}

    def create(self, appointment: Appointment) -> str:
        record_id = str(uuid.uuid4())
        self._records[record_id] = appointment
        return record_id

    def get(self, record_id: str) -> Appointment:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"appointment not found: {record_id}") from None

    def update(self, record_id: str, appointment: Appointment) -> None:
        if record_id not in self._records:
            raise RecordNotFoundError(f"appointment not found: {record_id}")
        self._records[record_id] = appointment

    def delete(self, record_id: str) -> None:
        if self._records.pop(record_id, None) is None:
            raise RecordNotFoundError(f"appointment not found: {record_id}")

    def count(self) -> int:
        return len(self._records)

    def all(self) -> list[tuple[str, Appointment]]:
        return list(self._records.items())

    def list(self, page: int = 1, limit: int = 10, *, newest_first: bool = False) -> Page[Appointment]:
        offset = check_paging(page, limit)
        items = list(self._records.items())
        if newest_first:
            items.reverse()
        return Page(items=items[offset:offset + limit], total=len(items), page=page, limit=limit)
