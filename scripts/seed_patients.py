"""Load patient records from a JSON file into the configured store."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from repositories.database import Database
from repositories.patients import SQLAlchemyPatientRecordRepository
from services.patient_records.service import Ok, PatientRecordService
from shared.config.settings import get_settings
from shared.models.patient import PatientRecord


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create patient records from a JSON array of record objects."
    )
    parser.add_argument(
        "path",
        type=Path,
        help="JSON file holding a list of {name, age, address} objects.",
    )
    parser.add_argument(
        "--database-url",
        dest="database_url",
        default=None,
        help="SQLAlchemy async URL overriding the configured database.",
    )
    parser.add_argument(
        "--create-schema",
        dest="create_schema",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Create the patient_record table before inserting rows.",
    )
    return parser


def load_payloads(path: Path) -> list[Any]:
    """Return the decoded list of record payloads stored at ``path``."""

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path}: top-level JSON payload must be an array")
    return payload


async def seed(service: PatientRecordService, payloads: Iterable[Any]) -> int:
    """Create each payload through ``service`` and return the failure count."""

    failures = 0
    for index, raw in enumerate(payloads):
        try:
            record = PatientRecord.model_validate(raw)
        except ValidationError as exc:
            print(f"record {index}: {exc.error_count()} invalid field(s)", file=sys.stderr)
            failures += 1
            continue

        result = await service.create_record(record)
        if isinstance(result, Ok):
            print(f"Created patient {result.value.patient_id} ({result.value.name})")
        else:
            print(f"record {index}: {result.message}", file=sys.stderr)
            failures += 1
    return failures


async def _run_async(args: argparse.Namespace) -> int:
    settings = get_settings()
    database = Database(
        args.database_url or settings.database.url, echo=settings.database.echo
    )
    try:
        if args.create_schema:
            await database.create_schema()
        service = PatientRecordService(SQLAlchemyPatientRecordRepository(database))
        failures = await seed(service, load_payloads(args.path))
    finally:
        await database.dispose()
    return 1 if failures else 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    parsed_args = parser.parse_args(None if argv is None else list(argv))
    try:
        return asyncio.run(_run_async(parsed_args))
    except KeyboardInterrupt:  # pragma: no cover - manual cancellation guard
        return 130
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
