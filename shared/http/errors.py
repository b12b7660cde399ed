"""Problem details and custom exceptions for HTTP responses."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, cast

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.observability.logger import get_logger

__all__ = [
    "PatientRecordNotFoundError",
    "PatientRecordValidationError",
    "ProblemDetails",
    "ProblemDetailsException",
    "register_exception_handlers",
]

logger = get_logger(__name__)

_PROBLEM_TYPE_BASE = "https://patient-records.local/problems"
_PROBLEM_FIELDS = {"type", "title", "status", "detail", "instance"}


class ProblemDetails(BaseModel):
    """Representation of an RFC 7807 problem details payload."""

    type: str = Field(
        default="about:blank", description="URI identifying the error type"
    )
    title: str = Field(
        default="An error occurred", description="Short human-readable summary"
    )
    status: int = Field(default=status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail: str | None = Field(
        default=None, description="Detailed description of the error"
    )
    instance: str | None = Field(
        default=None, description="URI identifying the specific occurrence"
    )
    errors: list[Any] | None = Field(
        default=None, description="Detailed validation errors when applicable"
    )

    model_config = ConfigDict(extra="allow")


class ProblemDetailsException(RuntimeError):
    """Base exception carrying structured problem details metadata."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_title = "Service Error"
    default_type = "about:blank"

    def __init__(
        self,
        detail: str | None = None,
        *,
        extensions: Mapping[str, Any] | None = None,
    ) -> None:
        message = detail or self.default_title
        super().__init__(message)
        self.detail = message
        self.status_code = self.default_status_code
        self.title = self.default_title
        self.problem_type = self.default_type
        self.extensions = dict(extensions or {})

    def to_problem_details(self, *, instance: str | None = None) -> ProblemDetails:
        """Return a :class:`ProblemDetails` representation of the exception."""

        return ProblemDetails(
            type=self.problem_type,
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            instance=instance,
            **self.extensions,
        )


class PatientRecordValidationError(ProblemDetailsException):
    """Raised when a patient record payload is missing required data."""

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_title = "Invalid Patient Record"
    default_type = f"{_PROBLEM_TYPE_BASE}/invalid-patient-record"

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail)


class PatientRecordNotFoundError(ProblemDetailsException):
    """Raised when a request targets a patient id that is not stored."""

    default_status_code = status.HTTP_404_NOT_FOUND
    default_title = "Patient Record Not Found"
    default_type = f"{_PROBLEM_TYPE_BASE}/patient-record-not-found"

    def __init__(self, patient_id: int, *, detail: str | None = None) -> None:
        self.patient_id = patient_id
        super().__init__(
            detail=detail or f"Patient with ID {patient_id} does not exist.",
            extensions={"patientId": patient_id},
        )


def _problem_response(problem: ProblemDetails) -> JSONResponse:
    payload = problem.model_dump(mode="json", exclude_none=True)
    status_code = payload.get("status", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        payload, status_code=status_code, media_type="application/problem+json"
    )


def _status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:  # pragma: no cover - non-standard status codes
        return "HTTP Error"


def _normalize_detail(detail: Any) -> tuple[str | None, dict[str, Any]]:
    if isinstance(detail, Mapping):
        detail_value = detail.get("detail") or detail.get("message")
        normalized = str(detail_value) if detail_value is not None else None
        extras = {k: v for k, v in detail.items() if k not in _PROBLEM_FIELDS}
        return normalized, extras
    if isinstance(detail, list):
        return None, {"errors": detail}
    if detail is None:
        return None, {}
    return str(detail), {}


def _http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_error = cast(StarletteHTTPException, exc)
    detail, extras = _normalize_detail(http_error.detail)
    problem = ProblemDetails(
        title=_status_title(http_error.status_code),
        status=http_error.status_code,
        detail=detail,
        instance=str(request.url),
        **extras,
    )
    return _problem_response(problem)


def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    validation_error = cast(RequestValidationError, exc)
    problem = ProblemDetails(
        type=f"{_PROBLEM_TYPE_BASE}/request-validation",
        title="Request Validation Failed",
        status=status.HTTP_400_BAD_REQUEST,
        detail="One or more request parameters failed validation.",
        instance=str(request.url),
        errors=jsonable_encoder(validation_error.errors()),
    )
    return _problem_response(problem)


def _problem_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    problem_exception = cast(ProblemDetailsException, exc)
    problem = problem_exception.to_problem_details(instance=str(request.url))
    return _problem_response(problem)


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc), path=str(request.url))
    problem = ProblemDetails(
        type=f"{_PROBLEM_TYPE_BASE}/internal-server-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing the request.",
        instance=str(request.url),
    )
    return _problem_response(problem)


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers that emit RFC 7807 problem details."""

    app.add_exception_handler(ProblemDetailsException, _problem_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
