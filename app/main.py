from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator, Callable

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_log_level, get_scheduler_settings
from app.services.import_orchestrator_service import ImportOrchestratorService, build_import_orchestrator
from db.session import Database


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle. The extraction API
    key check is skipped when EXTRACTION_ADAPTER=mock.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    if not any(
        os.getenv(name, "").strip()
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    ):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    # --- Extraction API key ---------------------------------------------
    adapter = os.getenv("EXTRACTION_ADAPTER", "openai").strip().lower()
    if adapter != "mock" and not os.getenv("OPENAI_API_KEY", "").strip():
        errors.append(
            "OPENAI_API_KEY is not set. Provide it or set EXTRACTION_ADAPTER=mock."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed; missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db(database: Database) -> None:
    """Run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    try:
        database.ping()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema(database: Database) -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base

    actual: set[str] = set(sa_inspect(database.engine).get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


def _build_lifespan(
    database: Database | None,
    orchestrator: ImportOrchestratorService | None,
) -> Callable[[FastAPI], AsyncIterator[None]]:
    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        """Open the datastore, wire the pipeline and start the optional sweep."""
        log = logging.getLogger(__name__)
        owns_database = database is None
        if owns_database:
            _validate_env()
            active_database = Database.from_env()
            _check_db(active_database)
            log.info("Database connectivity confirmed")
            _check_schema(active_database)
            log.info("Database schema validated")
        else:
            active_database = database

        application.state.database = active_database
        application.state.import_orchestrator = orchestrator or build_import_orchestrator(active_database)

        scheduler = None
        scheduler_settings = get_scheduler_settings()
        if scheduler_settings.sweep_enabled:
            from app.scheduler.jobs import build_scheduler

            scheduler = build_scheduler(application.state.import_orchestrator, scheduler_settings)
            scheduler.start()
            log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.shutdown(wait=True)
                log.info("Scheduler shut down")
            if owns_database:
                active_database.dispose()

    return _lifespan


def create_app(
    *,
    database: Database | None = None,
    orchestrator: ImportOrchestratorService | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Without ``database`` the lifespan builds one from the environment.
    """

    _configure_logging()

    application = FastAPI(
        title="Subsea Import API",
        version="1.0.0",
        lifespan=_build_lifespan(database, orchestrator),
    )

    from app.api.routers import imports_router

    application.include_router(imports_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
