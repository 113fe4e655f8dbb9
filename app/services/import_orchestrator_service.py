"""
Orchestrator service for import job creation, processing and lifecycle tracking.

A job moves pending → processing → completed | failed. The pending →
processing claim is a conditional UPDATE, so when several workers pick up
the same job only one of them runs it. Completed and failed are terminal.

A worker that dies mid-run leaves its job in ``processing``; such jobs are
not reclaimed automatically and must be reset by an operator.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any, Protocol

from fastapi import BackgroundTasks

from app.config import ExtractionSettings, ImportSettings, get_extraction_settings, get_import_settings
from app.domain.import_summary import BatchStats, ImportResult
from app.repositories.chunked_upsert_repository import ChunkedUpsertRepository
from app.services.aggregation_service import ProjectAggregationService, conflict_policy_for
from app.services.document_import_service import DocumentImportService
from app.services.workbook_import_service import WorkbookImportService
from db.models.import_batch import ImportFileType, ImportStatus
from db.models.import_job import ImportJob
from db.repositories.datastore import SqlAlchemyDatastore
from db.repositories.errors import (
    ImportJobClaimError,
    ImportJobNotFoundError,
    ImportRepositoryError,
    UnsupportedImportTypeError,
)
from db.repositories.import_batch_repository import ImportBatchRepository
from db.repositories.import_job_repository import ImportJobRepository
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import BatchCounts, QueuedUpload
from db.session import Database
from document_extraction.adapter import BaseExtractionAdapter, MockExtractionAdapter, OpenAIExtractionAdapter
from document_extraction.extractor import DocumentExtractor

logger = logging.getLogger(__name__)

_MAX_ERROR_MESSAGE_LENGTH = 2000


class ImportProcessingError(RuntimeError):
    """
    Raised by ``process_job`` after a claimed job was recorded as failed.
    """

    def __init__(self, *, job_id: uuid.UUID, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.message = message


class ImportTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


class ImportOrchestratorService:
    """
    Coordinates job creation, processing and status persistence.
    """

    def __init__(
        self,
        *,
        database: Database,
        storage: FileStorageBackend,
        workbook_service: WorkbookImportService,
        document_service: DocumentImportService,
    ) -> None:
        self._database = database
        self._storage = storage
        self._workbook_service = workbook_service
        self._document_service = document_service

    # ------------------------------------------------------------------
    # Queue side
    # ------------------------------------------------------------------

    def create_job(self, *, file_type: str, upload: QueuedUpload) -> ImportJob:
        if file_type not in ImportFileType.ALL:
            raise UnsupportedImportTypeError(f"Unsupported import file type: {file_type}")

        with self._database.session() as db:
            job = ImportJobRepository(db).create_job(file_type=file_type, upload=upload)
            db.commit()
        logger.info("Queued import job id=%s type=%s file=%s", job.id, file_type, upload.file_name)
        return job

    def queue_job(
        self,
        *,
        executor: ImportTaskExecutor,
        file_type: str,
        upload: QueuedUpload,
    ) -> ImportJob:
        job = self.create_job(file_type=file_type, upload=upload)
        try:
            executor.submit(self.run_job_in_background, job.id)
        except Exception:
            with self._database.session() as db:
                ImportJobRepository(db).transition_status(
                    job_id=job.id,
                    from_status=ImportStatus.PENDING,
                    to_status=ImportStatus.FAILED,
                    error_message="Failed to schedule import job.",
                )
                db.commit()
            raise
        return job

    def store_upload(
        self,
        *,
        bucket: str,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> QueuedUpload:
        stored = self._storage.save(
            bucket=bucket,
            file_name=file_name,
            content=content,
            content_type=content_type,
        )
        logger.info("Stored upload file=%s path=%s bytes=%s", file_name, stored.storage_path, stored.file_size_bytes)
        return QueuedUpload(
            file_name=stored.file_name,
            storage_bucket=stored.bucket,
            storage_path=stored.storage_path,
            file_size_bytes=stored.file_size_bytes,
        )

    def get_job_status(self, *, job_id: uuid.UUID) -> ImportJob | None:
        with self._database.session() as db:
            return ImportJobRepository(db).get_job(job_id)

    def list_job_statuses(self, *, limit: int = 40, status: str | None = None) -> list[ImportJob]:
        with self._database.session() as db:
            return ImportJobRepository(db).list_jobs(limit=limit, status=status)

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def process_job(self, job_id: uuid.UUID) -> ImportResult:
        """
        Run one job to a terminal state and return its final counts.

        Raises ``ImportJobNotFoundError``, ``UnsupportedImportTypeError`` or
        ``ImportJobClaimError`` before anything is processed, and
        ``ImportProcessingError`` once the job has been recorded as failed.
        A job that is already completed returns its stored counts.
        """

        with self._database.session() as db:
            repository = ImportJobRepository(db)
            job = repository.get_job(job_id)
            if job is None:
                raise ImportJobNotFoundError(f"Import job not found: {job_id}")
            if job.status == ImportStatus.COMPLETED:
                logger.info("Import job id=%s already completed; returning stored counts", job_id)
                return self._stored_result(job)
            if job.file_type not in ImportFileType.ALL:
                raise UnsupportedImportTypeError(f"Unsupported import file type: {job.file_type}")
            if not repository.claim_job(job_id=job_id):
                db.rollback()
                raise ImportJobClaimError(
                    f"Import job {job_id} could not be claimed (status={job.status})."
                )
            db.commit()

        logger.info("Processing import job id=%s type=%s file=%s", job_id, job.file_type, job.file_name)
        batch_id: uuid.UUID | None = None
        try:
            content = self._storage.read(bucket=job.storage_bucket, storage_path=job.storage_path)

            with self._database.session() as db:
                batch = ImportBatchRepository(db).start_batch(
                    file_name=job.file_name,
                    file_type=job.file_type,
                )
                ImportJobRepository(db).attach_batch(job_id=job_id, batch_id=batch.id)
                db.commit()
                batch_id = batch.id

            stats = self._run_processor(job, content=content, batch_id=batch_id)
            counts = BatchCounts(total=stats.total, imported=stats.imported, skipped=stats.skipped)

            with self._database.session() as db:
                ImportBatchRepository(db).complete_batch(batch_id=batch_id, counts=counts)
                ImportJobRepository(db).mark_completed(job_id=job_id, counts=counts)
                db.commit()
        except Exception as exc:
            message = self._mark_failed(job_id=job_id, batch_id=batch_id, exc=exc)
            raise ImportProcessingError(job_id=job_id, message=message) from exc

        logger.info(
            "Import job id=%s completed total=%s imported=%s skipped=%s",
            job_id,
            counts.total,
            counts.imported,
            counts.skipped,
        )
        return ImportResult(
            job_id=job_id,
            batch_id=batch_id,
            status=ImportStatus.COMPLETED,
            file_type=job.file_type,
            total=counts.total,
            imported=counts.imported,
            skipped=counts.skipped,
            tables=dict(stats.tables),
        )

    def run_job_in_background(self, job_id: uuid.UUID) -> None:
        try:
            self.process_job(job_id)
        except ImportProcessingError as exc:
            logger.error("Background import job id=%s failed: %s", job_id, exc.message)
        except ImportRepositoryError as exc:
            logger.warning("Background import job id=%s not processed: %s", job_id, exc)

    def process_pending_jobs(self, *, limit: int = 20) -> list[ImportResult]:
        """
        Sweep pending jobs oldest first. Jobs claimed elsewhere are skipped.
        """

        with self._database.session() as db:
            pending_ids = ImportJobRepository(db).list_pending_ids(limit=limit)

        results: list[ImportResult] = []
        for job_id in pending_ids:
            try:
                results.append(self.process_job(job_id))
            except ImportJobClaimError:
                logger.info("Import job id=%s claimed by another worker", job_id)
            except ImportProcessingError as exc:
                logger.error("Import job id=%s failed during sweep: %s", job_id, exc.message)
        return results

    def _run_processor(self, job: ImportJob, *, content: bytes, batch_id: uuid.UUID) -> BatchStats:
        if job.file_type == ImportFileType.EXCEL_RYSTAD:
            return self._workbook_service.import_workbook(
                content,
                file_name=job.file_name,
                batch_id=batch_id,
            )
        if job.file_type == ImportFileType.PDF_CONTRACT_AWARDS:
            return self._document_service.import_contract_awards(content, file_name=job.file_name)
        if job.file_type == ImportFileType.PDF_MARKET_REPORT:
            return self._document_service.import_market_report(
                content,
                file_name=job.file_name,
                file_path=f"{job.storage_bucket}/{job.storage_path}",
            )
        raise UnsupportedImportTypeError(f"Unsupported import file type: {job.file_type}")

    def _mark_failed(
        self,
        *,
        job_id: uuid.UUID,
        batch_id: uuid.UUID | None,
        exc: Exception,
    ) -> str:
        error_message = f"{type(exc).__name__}: {exc}"[:_MAX_ERROR_MESSAGE_LENGTH]
        logger.exception("Import job failed id=%s error=%s", job_id, error_message)
        with self._database.session() as db:
            try:
                if batch_id is not None:
                    ImportBatchRepository(db).fail_batch(batch_id=batch_id, error_message=error_message)
                if not ImportJobRepository(db).mark_failed(job_id=job_id, error_message=error_message):
                    logger.error("Unable to mark import job as failed; it is no longer processing id=%s", job_id)
                db.commit()
            except Exception:
                db.rollback()
                logger.exception("Failed to persist failed import job state id=%s", job_id)
        return error_message

    @staticmethod
    def _stored_result(job: ImportJob) -> ImportResult:
        return ImportResult(
            job_id=job.id,
            batch_id=job.import_batch_id,
            status=job.status,
            file_type=job.file_type,
            total=job.records_total,
            imported=job.records_imported,
            skipped=job.records_skipped,
            already_completed=True,
        )


def build_extraction_adapter(settings: ExtractionSettings) -> BaseExtractionAdapter:
    """Instantiate the adapter selected by EXTRACTION_ADAPTER.

    EXTRACTION_ADAPTER=mock   -> MockExtractionAdapter  (testing, no API key required)
    EXTRACTION_ADAPTER=openai -> OpenAIExtractionAdapter (default)
    """

    if settings.adapter == "mock":
        return MockExtractionAdapter()
    return OpenAIExtractionAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )


def build_import_orchestrator(
    database: Database,
    *,
    import_settings: ImportSettings | None = None,
    extraction_settings: ExtractionSettings | None = None,
    storage: FileStorageBackend | None = None,
    extraction_adapter: BaseExtractionAdapter | None = None,
) -> ImportOrchestratorService:
    """
    Wire the pipeline around an explicitly constructed ``Database``.
    """

    import_settings = import_settings or get_import_settings()
    extraction_settings = extraction_settings or get_extraction_settings()

    writer = ChunkedUpsertRepository(
        SqlAlchemyDatastore(database),
        chunk_size=import_settings.chunk_size,
    )
    aggregation = ProjectAggregationService(
        writer,
        conflict_policy=conflict_policy_for(import_settings.project_merge_policy),
    )
    extractor = DocumentExtractor(
        extraction_adapter or build_extraction_adapter(extraction_settings),
        max_retries=extraction_settings.max_retries,
    )
    return ImportOrchestratorService(
        database=database,
        storage=storage or LocalFileStorage(import_settings.storage_root),
        workbook_service=WorkbookImportService(writer=writer, aggregation=aggregation),
        document_service=DocumentImportService(database=database, writer=writer, extractor=extractor),
    )
