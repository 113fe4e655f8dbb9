"""
app/scheduler/jobs.py

APScheduler-based sweep that processes import jobs left in ``pending``.

Jobs are normally run by the FastAPI background task scheduled at intake.
The sweep picks up whatever that path missed (process restarts, jobs queued
by other writers). Claims are conditional, so an overlapping sweep and a
background task never run the same job twice.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings
from app.services.import_orchestrator_service import ImportOrchestratorService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: pending import sweep
# ---------------------------------------------------------------------------


def run_pending_import_sweep(orchestrator: ImportOrchestratorService, batch_size: int) -> None:
    """
    Process up to ``batch_size`` pending jobs, oldest first.
    """
    logger.info("Scheduler: import_sweep starting")
    results = orchestrator.process_pending_jobs(limit=batch_size)
    logger.info("Scheduler: import_sweep complete processed=%d", len(results))


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(
    orchestrator: ImportOrchestratorService,
    settings: SchedulerSettings,
) -> BackgroundScheduler:
    """
    Build the scheduler and register the pending-job sweep.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_pending_import_sweep,
        trigger="interval",
        seconds=settings.sweep_interval_seconds,
        args=[orchestrator, settings.sweep_batch_size],
        id="import_sweep",
        name="Pending import job sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.sweep_interval_seconds,
    )

    return scheduler
