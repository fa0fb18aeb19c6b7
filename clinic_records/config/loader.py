from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_DOB_PLACEHOLDERS,
    ColumnMapping,
    DatabaseConfig,
    ImportConfig,
)
from ..models.patient import Gender

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (FEMALE default gender, standard DOB placeholders)
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation (unknown keys, wrong types,
            bad table identifiers).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
        patients_table=db_raw.get("patients_table", "patients"),
        appointments_table=db_raw.get("appointments_table", "appointments"),
    )
    placeholders = data.get("dob_placeholders")
    return ImportConfig(
        source_file=data.get("source_file"),
        columns=ColumnMapping(**(data.get("columns") or {})),
        default_gender=Gender[data.get("default_gender", "FEMALE")],
        dob_placeholders=tuple(placeholders) if placeholders is not None else DEFAULT_DOB_PLACEHOLDERS,
        max_errors=data.get("max_errors"),
        keep_na_strings=tuple(data.get("keep_na_strings") or ()),
        database=db,
    )
