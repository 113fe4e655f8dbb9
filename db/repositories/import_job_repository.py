"""
Repository for import job lifecycle persistence and status lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from db.models.import_batch import ImportStatus
from db.models.import_job import ImportJob
from db.repositories.types import BatchCounts, QueuedUpload


class ImportJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(self, *, file_type: str, upload: QueuedUpload) -> ImportJob:
        job = ImportJob(
            file_name=upload.file_name,
            file_type=file_type,
            status=ImportStatus.PENDING,
            storage_bucket=upload.storage_bucket,
            storage_path=upload.storage_path,
            file_size_bytes=upload.file_size_bytes,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> ImportJob | None:
        return self._session.get(ImportJob, job_id, populate_existing=True)

    def list_jobs(
        self,
        *,
        limit: int = 40,
        status: str | None = None,
    ) -> list[ImportJob]:
        stmt: Select[tuple[ImportJob]] = select(ImportJob)
        if status:
            stmt = stmt.where(ImportJob.status == status)

        stmt = stmt.order_by(ImportJob.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def list_pending_ids(self, *, limit: int = 20) -> list[uuid.UUID]:
        stmt = (
            select(ImportJob.id)
            .where(ImportJob.status == ImportStatus.PENDING)
            .order_by(ImportJob.created_at.asc())
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def transition_status(
        self,
        *,
        job_id: uuid.UUID,
        from_status: str,
        to_status: str,
        **fields: object,
    ) -> bool:
        """
        Atomically move a job from ``from_status`` to ``to_status``.

        The UPDATE is guarded by the current status, so when two workers race
        only one of them sees a matched row. Returns whether this caller won.
        """

        stmt = (
            update(ImportJob)
            .where(ImportJob.id == job_id, ImportJob.status == from_status)
            .values(status=to_status, **fields)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount == 1

    def claim_job(self, *, job_id: uuid.UUID) -> bool:
        return self.transition_status(
            job_id=job_id,
            from_status=ImportStatus.PENDING,
            to_status=ImportStatus.PROCESSING,
            started_at=datetime.now(timezone.utc),
            error_message=None,
        )

    def attach_batch(self, *, job_id: uuid.UUID, batch_id: uuid.UUID) -> None:
        self._session.execute(
            update(ImportJob)
            .where(ImportJob.id == job_id)
            .values(import_batch_id=batch_id)
            .execution_options(synchronize_session=False)
        )

    def mark_completed(self, *, job_id: uuid.UUID, counts: BatchCounts) -> bool:
        return self.transition_status(
            job_id=job_id,
            from_status=ImportStatus.PROCESSING,
            to_status=ImportStatus.COMPLETED,
            records_total=counts.total,
            records_imported=counts.imported,
            records_skipped=counts.skipped,
            completed_at=datetime.now(timezone.utc),
            error_message=None,
        )

    def mark_failed(self, *, job_id: uuid.UUID, error_message: str) -> bool:
        return self.transition_status(
            job_id=job_id,
            from_status=ImportStatus.PROCESSING,
            to_status=ImportStatus.FAILED,
            completed_at=datetime.now(timezone.utc),
            error_message=error_message,
        )
