"""HTTP routes for the ``/patient`` resource."""

from __future__ import annotations

from typing import TypeVar

from fastapi import APIRouter, Body, Depends, Path, Request, Response, status

from shared.http.errors import PatientRecordNotFoundError, PatientRecordValidationError
from shared.models.patient import INT64_MAX, INT64_MIN, PatientRecord

from .service import NotFound, OperationResult, PatientRecordService, ValidationFailure

__all__ = ["get_patient_service", "router"]

T = TypeVar("T")

router = APIRouter(prefix="/patient", tags=["patients"])


def get_patient_service(request: Request) -> PatientRecordService:
    """Return the :class:`PatientRecordService` attached to the application."""

    return request.app.state.patient_service


def _unwrap(result: OperationResult[T]) -> T:
    """Translate a service outcome into a value or a problem-details error."""

    if isinstance(result, ValidationFailure):
        raise PatientRecordValidationError(result.message)
    if isinstance(result, NotFound):
        raise PatientRecordNotFoundError(result.patient_id, detail=result.message)
    return result.value


@router.get("", response_model=list[PatientRecord], status_code=status.HTTP_200_OK)
async def list_patient_records(
    service: PatientRecordService = Depends(get_patient_service),
) -> list[PatientRecord]:
    """Return every stored patient record."""

    return await service.list_records()


@router.get(
    "/{patient_id}", response_model=PatientRecord, status_code=status.HTTP_200_OK
)
async def read_patient_record(
    patient_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    service: PatientRecordService = Depends(get_patient_service),
) -> PatientRecord:
    """Return the record stored under ``patient_id``."""

    return _unwrap(await service.get_record(patient_id))


@router.post("", response_model=PatientRecord, status_code=status.HTTP_200_OK)
async def create_patient_record(
    payload: PatientRecord,
    service: PatientRecordService = Depends(get_patient_service),
) -> PatientRecord:
    """Persist a new record and return it with its assigned id."""

    return _unwrap(await service.create_record(payload))


@router.put("", response_model=PatientRecord, status_code=status.HTTP_200_OK)
async def update_patient_record(
    payload: PatientRecord | None = Body(default=None),
    service: PatientRecordService = Depends(get_patient_service),
) -> PatientRecord:
    """Overwrite name, age and address of an existing record."""

    return _unwrap(await service.update_record(payload))


@router.delete("/{patient_id}", status_code=status.HTTP_200_OK)
async def delete_patient_record(
    patient_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    service: PatientRecordService = Depends(get_patient_service),
) -> Response:
    """Delete the record stored under ``patient_id``."""

    _unwrap(await service.delete_record(patient_id))
    return Response(status_code=status.HTTP_200_OK)
