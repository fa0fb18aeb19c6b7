from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..models.config_models import DatabaseConfig

"""PostgreSQL connection handling.

Resolution order for connection parameters:
    1. variables loaded from `.env` (loaded with override, so they win)
    2. variables already present in the process environment
         - DATABASE_URL / PGDSN: used as the complete DSN
         - PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the `database:` section of config/import.yml for whatever is missing
"""

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DatabaseConnectionError(Exception):
    """Raised when no database connection can be established."""


def load_env_file(path: Path = Path(".env"), override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True lets .env values replace existing environment variables so
    the PostgreSQL parameters in .env take priority. A failure only warns.
    """
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        logger.warning("failed to load .env via python-dotenv: %s", e)


def check_identifier(name: str) -> str:
    """Reject table names that are not plain SQL identifiers."""
    if not _IDENTIFIER.match(name or ""):
        raise ValueError(f"invalid table name: {name!r}")
    return name


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn_env = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn_env:
        return dsn_env
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_connection(db_cfg: DatabaseConfig) -> Iterator[Any]:
    """Open one psycopg2 connection for the duration of a command.

    Stores commit per operation; anything left open at exit is rolled back.
    """
    try:
        conn = psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise DatabaseConnectionError(f"database connection failed: {e}") from e
    conn.autocommit = False
    try:
        yield conn
    finally:
        try:
            if not conn.closed:
                conn.rollback()
        finally:
            conn.close()
