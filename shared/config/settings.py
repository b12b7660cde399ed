"""Application configuration powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Runtime configuration for the FastAPI application instance."""

    service_name: str = Field(
        default="patient_records",
        description="Identifier attached to log entries and the health payload.",
        validation_alias=AliasChoices("PATIENT_RECORDS_SERVICE_NAME", "SERVICE_NAME"),
    )
    host: str = Field(
        default="0.0.0.0",
        description="Hostname or interface the HTTP server binds to.",
        validation_alias=AliasChoices("PATIENT_RECORDS_HOST", "HOST"),
    )
    port: int = Field(
        default=8080,
        description="Port the HTTP server listens on.",
        validation_alias=AliasChoices("PATIENT_RECORDS_PORT", "PORT"),
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class DatabaseSettings(BaseSettings):
    """Database connectivity configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./patient_records.db",
        description="SQLAlchemy async database URL for patient record storage.",
        validation_alias=AliasChoices("PATIENT_RECORDS_DB_URL", "DATABASE_URL"),
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement issued by the engine.",
        validation_alias=AliasChoices("PATIENT_RECORDS_DB_ECHO", "DATABASE_ECHO"),
    )
    create_schema: bool = Field(
        default=True,
        description="Create missing tables when the application starts.",
        validation_alias=AliasChoices(
            "PATIENT_RECORDS_DB_CREATE_SCHEMA", "DATABASE_CREATE_SCHEMA"
        ),
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class LoggingSettings(BaseSettings):
    """Logging configuration for the service."""

    level: str = Field(
        default="info",
        description="Logging verbosity level (e.g. debug, info, warning).",
        validation_alias=AliasChoices("PATIENT_RECORDS_LOG_LEVEL", "LOG_LEVEL"),
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    """Aggregated settings namespace for the patient records service."""

    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
