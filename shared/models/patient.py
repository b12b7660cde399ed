"""Patient record model shared by the HTTP layer and the repositories."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Signed 64-bit range accepted by the relational store for integer columns.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def to_camel(value: str) -> str:
    """Convert ``snake_case`` ``value`` into ``camelCase`` for JSON aliases."""

    first, *rest = value.split("_")
    return first + "".join(token.capitalize() for token in rest)


class CamelModel(BaseModel):
    """Base model applying camelCase aliases and ignoring unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PatientRecord(CamelModel):
    """A single patient entry.

    ``patient_id`` is assigned by the store and stays ``None`` until the
    record has been saved. ``name`` is only required when creating a record;
    updates overwrite it unconditionally.
    """

    patient_id: int | None = Field(
        default=None,
        ge=INT64_MIN,
        le=INT64_MAX,
        description="Store assigned identifier",
    )
    name: str | None = Field(default=None, description="Patient full name")
    age: int | None = Field(
        default=None, ge=INT64_MIN, le=INT64_MAX, description="Patient age in years"
    )
    address: str | None = Field(default=None, description="Postal address")


__all__ = ["INT64_MAX", "INT64_MIN", "CamelModel", "PatientRecord", "to_camel"]
