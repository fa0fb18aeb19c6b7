from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.connection import DatabaseConnectionError, db_connection, load_env_file
from ..db.memory_store import InMemoryAppointmentStore, InMemoryPatientStore
from ..db.postgres_store import PostgresAppointmentStore, PostgresPatientStore, ensure_schema
from ..db.sink import StoreError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..models.error_record import READ_ERROR, ErrorRecord
from ..services.dashboard import build_dashboard
from ..services.importer import BatchInputError, import_batch
from ..services.summary import render_summary_line
from ..tabular.reader import TabularReadError, read_header, read_rows

"""CLI entrypoint.

Commands:
- import [FILE]  bulk-import patient rows from .csv/.xlsx
- inspect FILE   print header and first rows, then exit
- dashboard      print patient/appointment counts
- init-db        create the patients/appointments tables

Exit codes: 0 all rows imported (or command succeeded), 2 at least one row
failed, 1 fatal (config, unreadable input, no database).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="clinic-records", description="Clinic patient records tool")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Use an in-memory store instead of PostgreSQL (nothing is persisted)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Bulk-import patients from a .csv/.xlsx file")
    imp.add_argument("file", nargs="?", type=Path, help="Input file (defaults to source_file in config)")

    insp = sub.add_parser("inspect", help="Print header and first rows of a file")
    insp.add_argument("file", type=Path)

    sub.add_parser("dashboard", help="Print dashboard counts")
    sub.add_parser("init-db", help="Create database tables")
    return p.parse_args(argv)


def _use_memory_store(args: argparse.Namespace) -> bool:
    # DISABLE_DB_CONNECT=1 forces the in-memory store (tests / offline runs)
    return args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"


@contextmanager
def _open_stores(cfg: ImportConfig, memory: bool) -> Iterator[tuple[Any, Any, str]]:
    """Yield (patient_store, appointment_store, mode) for one command."""
    if memory:
        yield InMemoryPatientStore(), InMemoryAppointmentStore(), "dry-run"
        return
    with db_connection(cfg.database) as conn:
        yield (
            PostgresPatientStore(conn, cfg.database.patients_table),
            PostgresAppointmentStore(conn, cfg.database.appointments_table),
            "live",
        )


def _inspect(path: Path, logger: logging.Logger) -> int:
    try:
        header = read_header(path)
        rows = read_rows(path)
    except TabularReadError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name} rows={len(rows)}")
    print(f"  columns={header}")
    for r in rows[:INSPECT_SAMPLE_ROWS]:
        print(f"  {r}")
    return EXIT_SUCCESS_ALL


def _run_import(args: argparse.Namespace, cfg: ImportConfig, logger: logging.Logger) -> int:
    source = args.file or (Path(cfg.source_file) if cfg.source_file else None)
    if source is None:
        logger.error("import: no input file given and no source_file in config")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    try:
        rows = read_rows(source, keep_na_strings=cfg.keep_na_strings)
    except TabularReadError as e:
        logger.error(f"read: {e}")
        error_log.append(ErrorRecord.create(source=source.name, row=-1, error_type=READ_ERROR, message=str(e)))
        error_log.flush()
        return EXIT_FATAL

    logger.info(f"Importing {len(rows)} rows from: {source}")
    start = time.monotonic()
    try:
        with _open_stores(cfg, _use_memory_store(args)) as (patients, _appointments, mode):
            logger.info(f"mode={mode}")
            # row_offset=1: the header occupies line 1, so row N is file line N+1
            report = import_batch(
                rows,
                patients,
                cfg,
                source=source.name,
                error_log=error_log,
                row_offset=1,
            )
    except DatabaseConnectionError as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
    except BatchInputError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    elapsed = time.monotonic() - start

    for message in report.errors:
        logger.warning(message)
    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(report, elapsed)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if report.has_failures else EXIT_SUCCESS_ALL


def _run_dashboard(args: argparse.Namespace, cfg: ImportConfig, logger: logging.Logger) -> int:
    try:
        with _open_stores(cfg, _use_memory_store(args)) as (patients, appointments, _mode):
            counts = build_dashboard(patients, appointments)
    except (DatabaseConnectionError, StoreError) as e:
        logger.error(f"dashboard: {e}")
        return EXIT_FATAL
    logger.info(f"total_patients={counts.total_patients}")
    logger.info(f"total_appointments={counts.total_appointments}")
    logger.info(f"upcoming_checkups={counts.upcoming_checkups}")
    for record_id, patient in counts.recent_patients:
        logger.info(f"recent_patient id={record_id} name={patient.name} rn={patient.registration_number}")
    for record_id, appt in counts.recent_appointments:
        logger.info(
            f"recent_appointment id={record_id} type={appt.type.label} "
            f"at={appt.datetime.isoformat()} patient_id={appt.patient_id}"
        )
    return EXIT_SUCCESS_ALL


def _run_init_db(args: argparse.Namespace, cfg: ImportConfig, logger: logging.Logger) -> int:
    if _use_memory_store(args):
        logger.error("init-db: requires a database connection (drop --dry-run / DISABLE_DB_CONNECT)")
        return EXIT_FATAL
    try:
        with db_connection(cfg.database) as conn:
            ensure_schema(conn, cfg.database)
    except (DatabaseConnectionError, StoreError) as e:
        logger.error(f"init-db: {e}")
        return EXIT_FATAL
    logger.info(f"tables ready: {cfg.database.patients_table}, {cfg.database.appointments_table}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # An explicit [] (tests) must not fall back to sys.argv.
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "inspect":
        return _inspect(args.file, logger)

    # .env first so database parameters from it take priority
    load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _run_import(args, cfg, logger)
    if args.command == "dashboard":
        return _run_dashboard(args, cfg, logger)
    return _run_init_db(args, cfg, logger)
