from __future__ import annotations

from typing import AsyncIterator

import pytest

from repositories.database import Database
from repositories.patients import (
    InMemoryPatientRecordRepository,
    SQLAlchemyPatientRecordRepository,
)
from shared.models.patient import PatientRecord


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def database() -> AsyncIterator[Database]:
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_schema()
    try:
        yield database
    finally:
        await database.dispose()


@pytest.fixture
def sql_repository(database: Database) -> SQLAlchemyPatientRecordRepository:
    return SQLAlchemyPatientRecordRepository(database)


@pytest.mark.anyio("asyncio")
async def test_in_memory_seed_without_ids_assigns_sequential_ids() -> None:
    repository = InMemoryPatientRecordRepository(
        [PatientRecord(name="Kopal"), PatientRecord(patient_id=7, name="Joan")]
    )

    saved = await repository.save(PatientRecord(name="John"))

    assert [record.patient_id for record in await repository.find_all()] == [1, 7, 8]
    assert saved.patient_id == 8


@pytest.mark.anyio("asyncio")
async def test_in_memory_returns_copies() -> None:
    repository = InMemoryPatientRecordRepository([PatientRecord(patient_id=1, name="Kopal")])

    record = await repository.find_by_id(1)
    assert record is not None
    record.name = "Changed"

    stored = await repository.find_by_id(1)
    assert stored is not None
    assert stored.name == "Kopal"


@pytest.mark.anyio("asyncio")
async def test_in_memory_delete_missing_id_is_noop() -> None:
    repository = InMemoryPatientRecordRepository([PatientRecord(patient_id=1, name="Kopal")])

    await repository.delete_by_id(5)

    assert len(await repository.find_all()) == 1


@pytest.mark.anyio("asyncio")
async def test_sqlalchemy_find_all_on_empty_store(
    sql_repository: SQLAlchemyPatientRecordRepository,
) -> None:
    assert await sql_repository.find_all() == []


@pytest.mark.anyio("asyncio")
async def test_sqlalchemy_save_inserts_and_assigns_id(
    sql_repository: SQLAlchemyPatientRecordRepository,
) -> None:
    first = await sql_repository.save(
        PatientRecord(name="Kopal Niranjan", age=23, address="Lucknow India")
    )
    second = await sql_repository.save(PatientRecord(name="Joan Arc", age=31))

    assert first.patient_id == 1
    assert second.patient_id == 2
    assert await sql_repository.find_by_id(1) == first
    assert await sql_repository.find_all() == [first, second]


@pytest.mark.anyio("asyncio")
async def test_sqlalchemy_save_with_id_overwrites_row(
    sql_repository: SQLAlchemyPatientRecordRepository,
) -> None:
    saved = await sql_repository.save(PatientRecord(name="Kopal", age=23))

    updated = await sql_repository.save(
        PatientRecord(patient_id=saved.patient_id, name="Baby Kopal", address="Bangalore India")
    )

    assert updated == PatientRecord(
        patient_id=saved.patient_id, name="Baby Kopal", age=None, address="Bangalore India"
    )
    assert await sql_repository.find_all() == [updated]


@pytest.mark.anyio("asyncio")
async def test_sqlalchemy_find_by_missing_id(
    sql_repository: SQLAlchemyPatientRecordRepository,
) -> None:
    assert await sql_repository.find_by_id(99) is None


@pytest.mark.anyio("asyncio")
async def test_sqlalchemy_delete_by_id(
    sql_repository: SQLAlchemyPatientRecordRepository,
) -> None:
    kept = await sql_repository.save(PatientRecord(name="Kopal"))
    removed = await sql_repository.save(PatientRecord(name="Suryansh"))
    assert removed.patient_id is not None

    await sql_repository.delete_by_id(removed.patient_id)
    await sql_repository.delete_by_id(404)

    assert await sql_repository.find_by_id(removed.patient_id) is None
    assert await sql_repository.find_all() == [kept]
