"""Entry point serving the patient records application with uvicorn."""

from __future__ import annotations

import uvicorn

from shared.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "services.patient_records.app:app",
        host=settings.app.host,
        port=settings.app.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
