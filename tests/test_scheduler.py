from __future__ import annotations

from app.config import SchedulerSettings
from app.scheduler.jobs import build_scheduler, run_pending_import_sweep
from app.services.import_orchestrator_service import ImportOrchestratorService
from db.models.import_batch import ImportFileType, ImportStatus


def test_build_scheduler_registers_single_sweep(orchestrator: ImportOrchestratorService) -> None:
    settings = SchedulerSettings(sweep_enabled=True, sweep_interval_seconds=30, sweep_batch_size=5)

    scheduler = build_scheduler(orchestrator, settings)

    job = scheduler.get_job("import_sweep")
    assert job is not None
    assert job.max_instances == 1
    assert job.coalesce is True
    assert job.args == (orchestrator, 5)
    assert not scheduler.running


def test_sweep_processes_pending_jobs(orchestrator: ImportOrchestratorService) -> None:
    upload = orchestrator.store_upload(bucket="imports", file_name="awards.pdf", content=b"%PDF-1.4")
    job = orchestrator.create_job(file_type=ImportFileType.PDF_CONTRACT_AWARDS, upload=upload)

    run_pending_import_sweep(orchestrator, 5)

    assert orchestrator.get_job_status(job_id=job.id).status == ImportStatus.COMPLETED
