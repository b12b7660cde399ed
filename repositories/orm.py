"""ORM table definitions for the patient record store."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base holding the service metadata."""


class PatientRecordRow(Base):
    __tablename__ = "patient_record"

    patient_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    # Nullable at the column level: updates overwrite the name unconditionally.
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"PatientRecordRow(patient_id={self.patient_id!r}, name={self.name!r})"


__all__ = ["Base", "PatientRecordRow"]
