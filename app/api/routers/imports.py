"""
Import intake, processing and status endpoints.
"""

from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import (
    get_import_orchestrator,
    get_named_upload,
    get_settings,
    get_upload_validator,
)
from app.config import ImportSettings
from app.domain.import_summary import ImportResult
from app.schemas.imports import (
    ImportJobQueuedResponse,
    ImportJobStatusResponse,
    ImportResultResponse,
    ImportStatusListResponse,
    ProcessJobRequest,
    QueueUploadRequest,
    TableCountsResponse,
)
from app.services.import_orchestrator_service import (
    FastAPIBackgroundTaskExecutor,
    ImportOrchestratorService,
    ImportProcessingError,
)
from app.validators.upload_validator import (
    EXCEL_EXTENSIONS,
    PDF_EXTENSIONS,
    UploadRules,
    UploadValidator,
    detect_pdf_type,
)
from db.models.import_batch import ImportFileType
from db.models.import_job import ImportJob
from db.repositories.errors import (
    FileStorageError,
    ImportJobClaimError,
    ImportJobNotFoundError,
    UnsupportedImportTypeError,
    UploadValidationError,
)

router = APIRouter(prefix="/imports", tags=["imports"])

INTAKE_KINDS: tuple[str, ...] = ("excel", "pdf", "report", "auto")


def _rules_for(kind: str, file_name: str, settings: ImportSettings) -> UploadRules:
    excel = UploadRules(allowed_extensions=EXCEL_EXTENSIONS, max_bytes=settings.max_excel_bytes)
    pdf = UploadRules(allowed_extensions=PDF_EXTENSIONS, max_bytes=settings.max_pdf_bytes)
    if kind == "excel":
        return excel
    if kind in {"pdf", "report"}:
        return pdf
    if file_name.lower().endswith(EXCEL_EXTENSIONS):
        return excel
    if file_name.lower().endswith(PDF_EXTENSIONS):
        return pdf
    return UploadRules(
        allowed_extensions=EXCEL_EXTENSIONS + PDF_EXTENSIONS,
        max_bytes=max(settings.max_excel_bytes, settings.max_pdf_bytes),
    )


def _file_type_for(kind: str, file_name: str) -> str:
    if kind == "excel":
        return ImportFileType.EXCEL_RYSTAD
    if kind == "pdf":
        return ImportFileType.PDF_CONTRACT_AWARDS
    if kind == "report":
        return ImportFileType.PDF_MARKET_REPORT
    if file_name.lower().endswith(EXCEL_EXTENSIONS):
        return ImportFileType.EXCEL_RYSTAD
    return detect_pdf_type(file_name)


def _queue(
    *,
    kind: str,
    payload: QueueUploadRequest,
    background_tasks: BackgroundTasks,
    orchestrator: ImportOrchestratorService,
    validator: UploadValidator,
    settings: ImportSettings,
) -> ImportJobQueuedResponse:
    file_name = (payload.file_name or "").strip()
    try:
        upload = validator.validate(payload.model_dump(), _rules_for(kind, file_name, settings))
    except UploadValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    job = orchestrator.queue_job(
        executor=FastAPIBackgroundTaskExecutor(background_tasks),
        file_type=_file_type_for(kind, upload.file_name),
        upload=upload,
    )
    return ImportJobQueuedResponse(job_id=job.id, status=job.status, file_type=job.file_type)


@router.post(
    "/excel",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportJobQueuedResponse,
)
def queue_excel_import(
    payload: QueueUploadRequest,
    background_tasks: BackgroundTasks,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    validator: UploadValidator = Depends(get_upload_validator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportJobQueuedResponse:
    return _queue(
        kind="excel",
        payload=payload,
        background_tasks=background_tasks,
        orchestrator=orchestrator,
        validator=validator,
        settings=settings,
    )


@router.post(
    "/pdf",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportJobQueuedResponse,
)
def queue_contract_awards_import(
    payload: QueueUploadRequest,
    background_tasks: BackgroundTasks,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    validator: UploadValidator = Depends(get_upload_validator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportJobQueuedResponse:
    return _queue(
        kind="pdf",
        payload=payload,
        background_tasks=background_tasks,
        orchestrator=orchestrator,
        validator=validator,
        settings=settings,
    )


@router.post(
    "/report",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportJobQueuedResponse,
)
def queue_market_report_import(
    payload: QueueUploadRequest,
    background_tasks: BackgroundTasks,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    validator: UploadValidator = Depends(get_upload_validator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportJobQueuedResponse:
    return _queue(
        kind="report",
        payload=payload,
        background_tasks=background_tasks,
        orchestrator=orchestrator,
        validator=validator,
        settings=settings,
    )


@router.post(
    "/auto",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportJobQueuedResponse,
)
def queue_auto_import(
    payload: QueueUploadRequest,
    background_tasks: BackgroundTasks,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    validator: UploadValidator = Depends(get_upload_validator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportJobQueuedResponse:
    return _queue(
        kind="auto",
        payload=payload,
        background_tasks=background_tasks,
        orchestrator=orchestrator,
        validator=validator,
        settings=settings,
    )


@router.post(
    "/upload",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportJobQueuedResponse,
)
def upload_and_queue_import(
    background_tasks: BackgroundTasks,
    file: UploadFile = Depends(get_named_upload),
    file_type: str = Query(default="auto", description="One of excel, pdf, report, auto"),
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    validator: UploadValidator = Depends(get_upload_validator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportJobQueuedResponse:
    kind = file_type.strip().lower()
    if kind not in INTAKE_KINDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file_type. Allowed: {', '.join(INTAKE_KINDS)}",
        )

    file_name = (file.filename or "").strip()
    try:
        content = file.file.read()
    finally:
        file.file.close()

    try:
        validator.validate_file(
            file_name=file_name,
            file_size_bytes=len(content),
            rules=_rules_for(kind, file_name, settings),
        )
        upload = orchestrator.store_upload(
            bucket=settings.storage_bucket,
            file_name=file_name,
            content=content,
            content_type=file.content_type,
        )
    except UploadValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except FileStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to store upload: {exc}",
        ) from exc

    job = orchestrator.queue_job(
        executor=FastAPIBackgroundTaskExecutor(background_tasks),
        file_type=_file_type_for(kind, upload.file_name),
        upload=upload,
    )
    return ImportJobQueuedResponse(job_id=job.id, status=job.status, file_type=job.file_type)


@router.post("/process", response_model=ImportResultResponse)
def process_import_job(
    payload: ProcessJobRequest,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
) -> ImportResultResponse:
    if payload.job_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing job_id")

    try:
        result = orchestrator.process_job(payload.job_id)
    except ImportJobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ImportJobClaimError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except UnsupportedImportTypeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ImportProcessingError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.message,
        ) from exc

    return _to_result_response(result)


@router.get("/status", response_model=ImportStatusListResponse)
def get_import_status(
    job_id: UUID | None = Query(default=None, description="Optional import job ID"),
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator),
    settings: ImportSettings = Depends(get_settings),
) -> ImportStatusListResponse:
    if job_id is not None:
        job = orchestrator.get_job_status(job_id=job_id)
        if job is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Import job not found: {job_id}",
            )
        return ImportStatusListResponse(jobs=[_to_status_response(job)])

    jobs = orchestrator.list_job_statuses(limit=settings.status_list_limit)
    return ImportStatusListResponse(jobs=[_to_status_response(job) for job in jobs])


def _to_result_response(result: ImportResult) -> ImportResultResponse:
    tables = {}
    for table, counts in result.tables.items():
        values = asdict(counts)
        values.pop("table")
        tables[table] = TableCountsResponse(**values)
    return ImportResultResponse(
        job_id=result.job_id,
        batch_id=result.batch_id,
        status=result.status,
        file_type=result.file_type,
        total=result.total,
        imported=result.imported,
        skipped=result.skipped,
        tables=tables,
        already_completed=result.already_completed,
    )


def _to_status_response(job: ImportJob) -> ImportJobStatusResponse:
    return ImportJobStatusResponse(
        job_id=job.id,
        file_name=job.file_name,
        file_type=job.file_type,
        status=job.status,
        import_batch_id=job.import_batch_id,
        records_total=job.records_total,
        records_imported=job.records_imported,
        records_skipped=job.records_skipped,
        error_message=job.error_message,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
    )
