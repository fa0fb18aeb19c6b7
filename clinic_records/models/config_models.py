from __future__ import annotations

from dataclasses import dataclass, field

from .patient import Gender

"""Config dataclasses for the clinic records tool.

These are built by clinic_records.config.loader from config/import.yml after
schema validation. All fields carry defaults so services and tests can build
an ImportConfig directly without a YAML file.
"""

DEFAULT_DOB_PLACEHOLDERS: tuple[str, ...] = ("NEW", "NEW print", "old")


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    patients_table: str = "patients"
    appointments_table: str = "appointments"


@dataclass(frozen=True)
class ColumnMapping:
    """Patient field -> source column header."""
    name: str = "Name"
    gender: str = "Gender"
    age: str = "Age"
    date_of_birth: str = "DateOfBirth"
    registration_number: str = "RegistrationNumber"
    passport_number: str = "PassportNumber"
    phone1: str = "PrimaryPhone"
    phone2: str = "SecondaryPhone"
    insurance_agent: str = "InsuranceAgent"
    insurance_plan: str = "InsurancePlan"


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for imports and store access."""
    source_file: str | None = None  # default input when the CLI gets none
    columns: ColumnMapping = field(default_factory=ColumnMapping)
    default_gender: Gender = Gender.FEMALE  # applied to unrecognized/absent gender
    dob_placeholders: tuple[str, ...] = DEFAULT_DOB_PLACEHOLDERS
    max_errors: int | None = None  # cap on BatchReport.errors, None = unbounded
    keep_na_strings: tuple[str, ...] = ()
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def dob_placeholder_keys(self) -> set[str]:
        """Placeholders upper-cased for case-insensitive comparison."""
        return {p.strip().upper() for p in self.dob_placeholders}
