"""Domain models for the clinic records tool.

Patients and appointments, the batch import result, structured error records
and configuration dataclasses.
"""

from .appointment import AdmissionType, Appointment, AppointmentStatus, AppointmentType
from .batch_report import BatchReport, RowRejection
from .config_models import ColumnMapping, DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .patient import Gender, PatientRecord

__all__ = [
    # Configuration models
    "ColumnMapping",
    "DatabaseConfig",
    "ImportConfig",
    # Records
    "AdmissionType",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "Gender",
    "PatientRecord",
    # Import results
    "BatchReport",
    "ErrorRecord",
    "RowRejection",
]
