"""HTTP helpers and exception definitions."""

from .errors import (
    PatientRecordNotFoundError,
    PatientRecordValidationError,
    ProblemDetails,
    ProblemDetailsException,
    register_exception_handlers,
)

__all__ = [
    "PatientRecordNotFoundError",
    "PatientRecordValidationError",
    "ProblemDetails",
    "ProblemDetailsException",
    "register_exception_handlers",
]
