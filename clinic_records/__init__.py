"""Clinic patient/appointment records with CSV bulk import."""

__version__ = "0.1.0"
