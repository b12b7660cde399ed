"""Repository abstractions for storing patient records."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import delete, select

from repositories.database import Database
from repositories.orm import PatientRecordRow
from shared.models.patient import PatientRecord

__all__ = [
    "InMemoryPatientRecordRepository",
    "PatientRecordRepository",
    "SQLAlchemyPatientRecordRepository",
]


class PatientRecordRepository(Protocol):
    """Persistence contract consumed by the patient record service."""

    async def find_all(self) -> list[PatientRecord]:  # pragma: no cover - interface definition
        """Return every stored record in store iteration order."""

    async def find_by_id(self, patient_id: int) -> PatientRecord | None:  # pragma: no cover - interface definition
        """Return the record stored under ``patient_id`` if one exists."""

    async def save(self, record: PatientRecord) -> PatientRecord:  # pragma: no cover - interface definition
        """Insert ``record`` when it has no id, otherwise overwrite the stored row."""

    async def delete_by_id(self, patient_id: int) -> None:  # pragma: no cover - interface definition
        """Remove the record stored under ``patient_id``."""


class InMemoryPatientRecordRepository:
    """Dictionary backed repository keyed by patient id.

    Records without an id are assigned the next free integer when seeded or
    saved. Stored records are copied on the way in and out so callers never
    share state with the store.
    """

    def __init__(self, records: Iterable[PatientRecord] | None = None) -> None:
        self._records: dict[int, PatientRecord] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        for record in records or ():
            self._store(record)

    def _store(self, record: PatientRecord) -> PatientRecord:
        patient_id = record.patient_id
        if patient_id is None:
            patient_id = self._next_id
        self._next_id = max(self._next_id, patient_id + 1)
        stored = record.model_copy(update={"patient_id": patient_id})
        self._records[patient_id] = stored
        return stored.model_copy()

    async def find_all(self) -> list[PatientRecord]:
        return [record.model_copy() for record in self._records.values()]

    async def find_by_id(self, patient_id: int) -> PatientRecord | None:
        record = self._records.get(patient_id)
        return record.model_copy() if record is not None else None

    async def save(self, record: PatientRecord) -> PatientRecord:
        async with self._lock:
            return self._store(record)

    async def delete_by_id(self, patient_id: int) -> None:
        async with self._lock:
            self._records.pop(patient_id, None)


class SQLAlchemyPatientRecordRepository:
    """Repository backed by the ``patient_record`` table.

    Every call runs in its own session obtained from ``database``.

    Example:
        >>> repository = SQLAlchemyPatientRecordRepository(Database(url))
        >>> saved = await repository.save(PatientRecord(name="Joan Arc"))
        >>> saved.patient_id is not None
        True
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    async def find_all(self) -> list[PatientRecord]:
        stmt = select(PatientRecordRow).order_by(PatientRecordRow.patient_id)
        async with self._database.session() as session:
            result = await session.execute(stmt)
            return [self._to_domain(row) for row in result.scalars()]

    async def find_by_id(self, patient_id: int) -> PatientRecord | None:
        async with self._database.session() as session:
            row = await session.get(PatientRecordRow, patient_id)
            return self._to_domain(row) if row is not None else None

    async def save(self, record: PatientRecord) -> PatientRecord:
        row = PatientRecordRow(
            name=record.name, age=record.age, address=record.address
        )
        async with self._database.session() as session:
            if record.patient_id is None:
                session.add(row)
            else:
                row.patient_id = record.patient_id
                row = await session.merge(row)
            await session.flush()
            return self._to_domain(row)

    async def delete_by_id(self, patient_id: int) -> None:
        stmt = delete(PatientRecordRow).where(PatientRecordRow.patient_id == patient_id)
        async with self._database.session() as session:
            await session.execute(stmt)

    @staticmethod
    def _to_domain(row: PatientRecordRow) -> PatientRecord:
        return PatientRecord(
            patient_id=row.patient_id,
            name=row.name,
            age=row.age,
            address=row.address,
        )
