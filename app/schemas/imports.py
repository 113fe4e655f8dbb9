"""
Schemas for import intake, processing and status endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class QueueUploadRequest(BaseModel):
    file_name: str | None = None
    storage_path: str | None = None
    storage_bucket: str | None = None
    file_size_bytes: int | None = None


class ImportJobQueuedResponse(BaseModel):
    job_id: UUID
    status: str
    file_type: str


class ProcessJobRequest(BaseModel):
    job_id: UUID | None = None


class TableCountsResponse(BaseModel):
    imported: int = 0
    skipped: int = 0
    failed_chunks: int = 0


class ImportResultResponse(BaseModel):
    job_id: UUID
    batch_id: UUID | None = None
    status: str
    file_type: str
    total: int
    imported: int
    skipped: int
    tables: dict[str, TableCountsResponse] = Field(default_factory=dict)
    already_completed: bool = False


class ImportJobStatusResponse(BaseModel):
    job_id: UUID
    file_name: str
    file_type: str
    status: str
    import_batch_id: UUID | None = None
    records_total: int
    records_imported: int
    records_skipped: int
    error_message: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class ImportStatusListResponse(BaseModel):
    jobs: list[ImportJobStatusResponse] = Field(default_factory=list)
