"""Data models shared across the service."""

from .patient import CamelModel, PatientRecord, to_camel

__all__ = ["CamelModel", "PatientRecord", "to_camel"]
