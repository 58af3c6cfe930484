import argparse
import asyncio
import json
import mimetypes
from pathlib import Path

from taxibot.compliance.models import ComplianceWarning
from taxibot.compliance.monitor import ComplianceMonitor
from taxibot.config.settings import Settings
from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError
from taxibot.database.repositories.compliance_warnings_repository import (
    ComplianceWarningsRepository,
)
from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.database.schema import ensure_schema
from taxibot.logging.logger import Log
from taxibot.processor.models import PipelineResult
from taxibot.processor.processor import Processor, build_processor

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_MIME_TYPE


async def process_file(
    processor: Processor,
    path: Path,
    user_id: int | None,
    timeout_seconds: float,
) -> PipelineResult:
    """Run one pipeline; on timeout the run is cancelled and no later stage starts."""
    raw_bytes = await asyncio.to_thread(path.read_bytes)
    return await asyncio.wait_for(
        processor.process(raw_bytes, guess_mime_type(path), user_id=user_id),
        timeout=timeout_seconds,
    )


async def check_user_obligations(
    database: Database | None, user_id: int | None
) -> list[ComplianceWarning] | None:
    """Run the compliance monitor; None when the check cannot run."""
    if database is None or user_id is None:
        Log.warning("Obligation check needs --user-id and document persistence, skipped")
        return None
    monitor = ComplianceMonitor(
        DocumentsRepository(database), ComplianceWarningsRepository(database)
    )
    try:
        return await monitor.check(user_id)
    except StorageError as exc:
        Log.error(f"Obligation check failed for user {user_id}: {exc}")
        return None


async def run(
    paths: list[Path],
    user_id: int | None,
    settings: Settings,
    check_obligations: bool = False,
) -> int:
    """Process files concurrently; returns the number of failed documents."""
    database = Database(settings) if settings.persist_documents else None
    obligation_warnings = None
    try:
        if database is not None:
            await database.open()
            await ensure_schema(database)
        processor = build_processor(settings, database=database)
        outcomes = await asyncio.gather(
            *(
                process_file(processor, path, user_id, settings.pipeline_timeout_seconds)
                for path in paths
            ),
            return_exceptions=True,
        )
        if check_obligations:
            obligation_warnings = await check_user_obligations(database, user_id)
    finally:
        if database is not None:
            await database.close()

    failures = 0
    for path, outcome in zip(paths, outcomes):
        if isinstance(outcome, PipelineResult):
            print(json.dumps({"file": str(path), "result": outcome.to_dict()}, ensure_ascii=False))
        elif isinstance(outcome, BaseException):
            failures += 1
            reason = str(outcome) or type(outcome).__name__
            Log.error(f"{path}: {reason}")
            print(json.dumps({"file": str(path), "error": reason}, ensure_ascii=False))
    if obligation_warnings is not None:
        print(
            json.dumps(
                {
                    "userId": user_id,
                    "complianceWarnings": [warning.to_dict() for warning in obligation_warnings],
                },
                ensure_ascii=False,
            )
        )
    return failures


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> configure logging -> process documents."""
    parser = argparse.ArgumentParser(
        prog="taxibot",
        description="Calculate taxes and check compliance for Brazilian fiscal documents.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="PDF, image, XML or text documents")
    parser.add_argument("--user-id", type=int, default=None, help="owner id for stored documents")
    parser.add_argument(
        "--check-obligations",
        action="store_true",
        help="also check revenue and obligation deadlines for --user-id",
    )
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level)
    failures = asyncio.run(
        run(args.files, args.user_id, settings, check_obligations=args.check_obligations)
    )
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
