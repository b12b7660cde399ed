"""FastAPI application exposing patient record CRUD operations."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from repositories.database import Database
from repositories.patients import (
    PatientRecordRepository,
    SQLAlchemyPatientRecordRepository,
)
from shared.config.settings import Settings, get_settings
from shared.http.errors import register_exception_handlers
from shared.observability.logger import configure_logging
from shared.observability.middleware import (
    CorrelationIdMiddleware,
    RequestTimingMiddleware,
)

from .router import router
from .service import PatientRecordService


def create_app(
    repository: PatientRecordRepository | None = None,
    *,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application around ``repository``.

    When no repository is given the application owns a :class:`Database`
    built from ``settings``: tables are created on startup (unless disabled)
    and the engine is disposed on shutdown.
    """

    settings = settings or get_settings()
    configure_logging(
        service_name=settings.app.service_name, level=settings.logging.level
    )

    database: Database | None = None
    if repository is None:
        database = Database(settings.database.url, echo=settings.database.echo)
        repository = SQLAlchemyPatientRecordRepository(database)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if database is not None and settings.database.create_schema:
            await database.create_schema()
        try:
            yield
        finally:
            if database is not None:
                await database.dispose()

    app = FastAPI(title="Patient Records Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.patient_service = PatientRecordService(repository)

    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return a simple health payload for orchestration checks."""

        return {"status": "ok", "service": settings.app.service_name}

    app.include_router(router)
    return app


app = create_app()


def get_app() -> FastAPI:
    """Return the FastAPI app instance."""

    return app


__all__ = ["app", "create_app", "get_app"]
