from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

import psycopg2

from ..models.appointment import Appointment
from ..models.config_models import DatabaseConfig
from ..models.patient import PatientRecord
from .connection import check_identifier
from .sink import Page, PatientFilters, RecordNotFoundError, StoreError, check_paging, resolve_dob_filter

"""PostgreSQL-backed patient and appointment stores.

Every write runs in its own transaction (COMMIT on success, ROLLBACK on any
psycopg2 error) so a failed row never poisons the connection for the next
one. Ids are uuid4 strings generated client-side. Table names come from
DatabaseConfig and are checked as plain identifiers before use.
"""

__all__ = [
    "PostgresAppointmentStore",
    "PostgresPatientStore",
    "ensure_schema",
]

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = (
    "name",
    "gender",
    "age",
    "date_of_birth",
    "rn",
    "passport_number",
    "phone1",
    "phone2",
    "insurance_agent",
    "insurance_plan",
)

APPOINTMENT_COLUMNS = (
    "patient_id",
    "type",
    "admission_type",
    "datetime",
    "doctor",
    "status",
)

PATIENTS_DDL = """CREATE TABLE IF NOT EXISTS {table} (
    id text PRIMARY KEY,
    name text NOT NULL,
    gender smallint NOT NULL,
    age integer,
    date_of_birth date,
    rn text NOT NULL DEFAULT '',
    passport_number text NOT NULL DEFAULT '',
    phone1 text NOT NULL DEFAULT '',
    phone2 text NOT NULL DEFAULT '',
    insurance_agent text NOT NULL DEFAULT '',
    insurance_plan text NOT NULL DEFAULT '',
    created_at timestamptz NOT NULL DEFAULT now()
)"""

APPOINTMENTS_DDL = """CREATE TABLE IF NOT EXISTS {table} (
    id text PRIMARY KEY,
    patient_id text NOT NULL,
    type smallint NOT NULL,
    admission_type smallint NOT NULL,
    "datetime" timestamptz NOT NULL,
    doctor text NOT NULL DEFAULT '',
    status smallint NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL DEFAULT now()
)"""


def _cols_sql(columns: Sequence[str]) -> str:
    return ",".join(f'"{c}"' for c in columns)


class _PostgresStore:
    """Shared statement execution with per-call transaction boundary."""

    def __init__(self, conn: Any, table: str) -> None:
        self._conn = conn
        self.table = check_identifier(table)

    def _run(self, sql: str, params: Sequence[Any] = (), *, fetch: str | None = None) -> Any:
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql, params)
                if fetch == "one":
                    result = cur.fetchone()
                elif fetch == "all":
                    result = cur.fetchall()
                else:
                    result = cur.rowcount
            self._conn.commit()
            return result
        except psycopg2.Error as e:
            try:
                self._conn.rollback()
            except psycopg2.Error:  # pragma: no cover
                logger.debug("rollback failed table=%s", self.table, exc_info=True)
            raise StoreError(str(e).strip()) from e

    def count(self) -> int:
        row = self._run(f"SELECT count(*) FROM {self.table}", fetch="one")
        return int(row[0]) if row else 0

    def delete(self, record_id: str) -> None:
        if self._run(f"DELETE FROM {self.table} WHERE id = %s", (record_id,)) == 0:
            raise RecordNotFoundError(f"{self.table} record not found: {record_id}")


class PostgresPatientStore(_PostgresStore):
    def __init__(self, conn: Any, table: str = "patients") -> None:
        super().__init__(conn, table)

    @staticmethod
    def _values(record: PatientRecord) -> list[Any]:
        doc = record.to_document()
        return [doc[c] for c in PATIENT_COLUMNS]

    @staticmethod
    def _from_row(row: Sequence[Any]) -> tuple[str, PatientRecord]:
        return row[0], PatientRecord.from_document(dict(zip(PATIENT_COLUMNS, row[1:], strict=False)))

    def create(self, record: PatientRecord) -> str:
        record_id = str(uuid.uuid4())
        placeholders = ",".join(["%s"] * (len(PATIENT_COLUMNS) + 1))
        self._run(
            f"INSERT INTO {self.table} (id,{_cols_sql(PATIENT_COLUMNS)}) VALUES ({placeholders})",
            [record_id, *self._values(record)],
        )
        return record_id

    def get(self, record_id: str) -> PatientRecord:
        row = self._run(
            f"SELECT id,{_cols_sql(PATIENT_COLUMNS)} FROM {self.table} WHERE id = %s",
            (record_id,),
            fetch="one",
        )
        if row is None:
            raise RecordNotFoundError(f"patient not found: {record_id}")
        return self._from_row(row)[1]

    def update(self, record_id: str, record: PatientRecord) -> None:
        assignments = ",".join(f'"{c}" = %s' for c in PATIENT_COLUMNS)
        updated = self._run(
            f"UPDATE {self.table} SET {assignments} WHERE id = %s",
            [*self._values(record), record_id],
        )
        if updated == 0:
            raise RecordNotFoundError(f"patient not found: {record_id}")

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
        clauses: list[str] = []
        params: list[Any] = []
        # strpos() keeps the match a plain, case-sensitive substring test
        for column, value in (("name", f.search), ("rn", f.rn), ("passport_number", f.passport)):
            if value:
                clauses.append(f"strpos({column}, %s) > 0")
                params.append(value)
        dob = resolve_dob_filter(f)
        if dob:
            clauses.append("date_of_birth = %s")
            params.append(dob)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        order = "DESC" if newest_first else "ASC"

        total_row = self._run(f"SELECT count(*) FROM {self.table}{where}", params, fetch="one")
        rows = self._run(
            f"SELECT id,{_cols_sql(PATIENT_COLUMNS)} FROM {self.table}{where} "
            f"ORDER BY created_at {order}, id LIMIT %s OFFSET %s",
            [*params, limit, offset],
            fetch="all",
        )
        return Page(
            items=[self._from_row(r) for r in rows],
            total=int(total_row[0]) if total_row else 0,
            page=page,
            limit=limit,
        )


class PostgresAppointmentStore(_PostgresStore):
    def __init__(self, conn: Any, table: str = "appointments") -> None:
        super().__init__(conn, table)

    @staticmethod
    def _values(appointment: Appointment) -> list[Any]:
        return [
            appointment.patient_id,
            int(appointment.type),
            int(appointment.admission_type),
            appointment.datetime,
            appointment.doctor,
            int(appointment.status),
        ]

    @staticmethod
    def _from_row(row: Sequence[Any]) -> tuple[str, Appointment]:
        return row[0], Appointment.from_document(dict(zip(APPOINTMENT_COLUMNS, row[1:], strict=False)))

    def create(self, appointment: Appointment) -> str:
        record_id = str(uuid.uuid4())
        placeholders = ",".join(["%s"] * (len(APPOINTMENT_COLUMNS) + 1))
        self._run(
            f"INSERT INTO {self.table} (id,{_cols_sql(APPOINTMENT_COLUMNS)}) VALUES ({placeholders})",
            [record_id, *self._values(appointment)],
        )
        return record_id

    def get(self, record_id: str) -> Appointment:
        row = self._run(
            f"SELECT id,{_cols_sql(APPOINTMENT_COLUMNS)} FROM {self.table} WHERE id = %s",
            (record_id,),
            fetch="one",
        )
        if row is None:
            raise RecordNotFoundError(f"appointment not found: {record_id}")
        return self._from_row(row)[1]

    def update(self, record_id: str, appointment: Appointment) -> None:
        assignments = ",".join(f'"{c}" = %s' for c in APPOINTMENT_COLUMNS)
        updated = self._run(
            f"UPDATE {self.table} SET {assignments} WHERE id = %s",
            [*self._values(appointment), record_id],
        )
        if updated == 0:
            raise RecordNotFoundError(f"appointment not found: {record_id}")

    def all(self) -> list[tuple[str, Appointment]]:
        rows = self._run(
            f"SELECT id,{_cols_sql(APPOINTMENT_COLUMNS)} FROM {self.table} ORDER BY created_at, id",
            fetch="all",
        )
        return [self._from_row(r) for r in rows]

    def list(self, page: int = 1, limit: int = 10, *, newest_first: bool = False) -> Page[Appointment]:
        offset = check_paging(page, limit)
        order = "DESC" if newest_first else "ASC"
        total = self.count()
        rows = self._run(
            f"SELECT id,{_cols_sql(APPOINTMENT_COLUMNS)} FROM {self.table} "
            f"ORDER BY created_at {order}, id LIMIT %s OFFSET %s",
            (limit, offset),
            fetch="all",
        )
        return Page(items=[self._from_row(r) for r in rows], total=total, page=page, limit=limit)


def ensure_schema(conn: Any, db_cfg: DatabaseConfig) -> None:
    """Create the patients/appointments tables when missing."""
    statements = (
        PATIENTS_DDL.format(table=check_identifier(db_cfg.patients_table)),
        APPOINTMENTS_DDL.format(table=check_identifier(db_cfg.appointments_table)),
    )
    try:
        with conn.cursor() as cur:
            for sql in statements:
                cur.execute(sql)
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        raise StoreError(f"schema creation failed: {e}") from e
