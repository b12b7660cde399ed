"""Patient record operations expressed as explicit result values.

The service never raises for expected failures. Each operation returns
:class:`Ok` on success, :class:`ValidationFailure` when the input is
unusable, or :class:`NotFound` when the targeted id is not stored. The HTTP
layer decides how those outcomes are rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from repositories.patients import PatientRecordRepository
from shared.models.patient import PatientRecord
from shared.observability.logger import get_logger

__all__ = [
    "NotFound",
    "Ok",
    "OperationResult",
    "PatientRecordService",
    "ValidationFailure",
    "merge",
]

T = TypeVar("T")

MISSING_ID_MESSAGE = "PatientRecord or ID must not be null!"
BLANK_NAME_MESSAGE = "Patient name must not be blank!"

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's value."""

    value: T


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """The request was rejected before the store was touched."""

    message: str


@dataclass(frozen=True, slots=True)
class NotFound:
    """The request referenced a patient id that is not stored."""

    patient_id: int

    @property
    def message(self) -> str:
        return f"Patient with ID {self.patient_id} does not exist."


OperationResult = Union[Ok[T], ValidationFailure, NotFound]


def merge(existing: PatientRecord, incoming: PatientRecord) -> PatientRecord:
    """Return ``existing`` with the mutable fields taken from ``incoming``.

    Only ``name``, ``age`` and ``address`` are copied; the identifier always
    comes from ``existing``. Neither argument is modified.
    """

    return existing.model_copy(
        update={
            "name": incoming.name,
            "age": incoming.age,
            "address": incoming.address,
        }
    )


class PatientRecordService:
    """Create, read, update and delete patient records through a repository."""

    def __init__(self, repository: PatientRecordRepository) -> None:
        self._repository = repository

    async def list_records(self) -> list[PatientRecord]:
        """Return every stored record as the repository iterates them."""

        return await self._repository.find_all()

    async def get_record(self, patient_id: int) -> OperationResult[PatientRecord]:
        record = await self._repository.find_by_id(patient_id)
        if record is None:
            return NotFound(patient_id)
        return Ok(record)

    async def create_record(
        self, payload: PatientRecord
    ) -> OperationResult[PatientRecord]:
        """Validate and persist a new record; the store assigns its id."""

        if payload.name is None or not payload.name.strip():
            return ValidationFailure(BLANK_NAME_MESSAGE)

        saved = await self._repository.save(
            payload.model_copy(update={"patient_id": None})
        )
        logger.info("patient_record_created", patient_id=saved.patient_id)
        return Ok(saved)

    async def update_record(
        self, payload: PatientRecord | None
    ) -> OperationResult[PatientRecord]:
        """Overwrite the mutable fields of an existing record.

        A payload without an id is rejected before any lookup; an id that is
        not stored yields :class:`NotFound` and nothing is written.
        """

        if payload is None or payload.patient_id is None:
            return ValidationFailure(MISSING_ID_MESSAGE)

        existing = await self._repository.find_by_id(payload.patient_id)
        if existing is None:
            return NotFound(payload.patient_id)

        saved = await self._repository.save(merge(existing, payload))
        logger.info("patient_record_updated", patient_id=saved.patient_id)
        return Ok(saved)

    async def delete_record(self, patient_id: int) -> OperationResult[None]:
        if await self._repository.find_by_id(patient_id) is None:
            logger.error("patient_record_missing", patient_id=patient_id)
            return NotFound(patient_id)

        await self._repository.delete_by_id(patient_id)
        logger.info("patient_record_deleted", patient_id=patient_id)
        return Ok(None)
