"""
Process one queued import job, or sweep pending jobs, from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import uuid
from dataclasses import asdict

from app.config import get_log_level
from app.domain.import_summary import ImportResult
from app.services.import_orchestrator_service import ImportProcessingError, build_import_orchestrator
from db.repositories.errors import ImportRepositoryError
from db.session import Database


def _result_payload(result: ImportResult) -> dict[str, object]:
    return {
        "job_id": str(result.job_id),
        "batch_id": str(result.batch_id) if result.batch_id else None,
        "status": result.status,
        "file_type": result.file_type,
        "total": result.total,
        "imported": result.imported,
        "skipped": result.skipped,
        "tables": {
            table: {key: value for key, value in asdict(counts).items() if key != "table"}
            for table, counts in result.tables.items()
        },
        "already_completed": result.already_completed,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Run queued import jobs.")
    parser.add_argument(
        "job_id",
        nargs="?",
        default=None,
        help="Import job ID. Omit with --pending to sweep pending jobs.",
    )
    parser.add_argument(
        "--pending",
        dest="pending",
        type=int,
        default=None,
        help="Process up to N pending jobs, oldest first.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.job_id is None and args.pending is None:
        parser.error("job_id or --pending is required")

    try:
        job_id = uuid.UUID(args.job_id) if args.job_id is not None else None
    except ValueError:
        parser.error(f"invalid job_id: {args.job_id}")

    database = Database.from_env()
    try:
        orchestrator = build_import_orchestrator(database)
        if job_id is None:
            results = orchestrator.process_pending_jobs(limit=max(1, args.pending))
            print(json.dumps([_result_payload(result) for result in results], indent=2))
            return 0

        try:
            result = orchestrator.process_job(job_id)
        except ImportProcessingError as exc:
            print(json.dumps({"job_id": str(job_id), "status": "failed", "error": exc.message}, indent=2))
            return 1
        except ImportRepositoryError as exc:
            print(json.dumps({"job_id": str(job_id), "error": str(exc)}, indent=2))
            return 2

        print(json.dumps(_result_payload(result), indent=2))
        return 0
    finally:
        database.dispose()


if __name__ == "__main__":
    raise SystemExit(main())
