"""
Repository for import batch rows. A batch is immutable once terminal.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from db.models.import_batch import ImportBatch, ImportStatus
from db.repositories.types import BatchCounts


class ImportBatchRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def start_batch(self, *, file_name: str, file_type: str) -> ImportBatch:
        batch = ImportBatch(
            file_name=file_name,
            file_type=file_type,
            status=ImportStatus.PROCESSING,
        )
        self._session.add(batch)
        self._session.flush()
        self._session.refresh(batch)
        return batch

    def get_batch(self, batch_id: uuid.UUID) -> ImportBatch | None:
        return self._session.get(ImportBatch, batch_id, populate_existing=True)

    def complete_batch(self, *, batch_id: uuid.UUID, counts: BatchCounts) -> bool:
        return self._finish(
            batch_id,
            status=ImportStatus.COMPLETED,
            records_total=counts.total,
            records_imported=counts.imported,
            records_skipped=counts.skipped,
            error_message=None,
        )

    def fail_batch(self, *, batch_id: uuid.UUID, error_message: str) -> bool:
        return self._finish(batch_id, status=ImportStatus.FAILED, error_message=error_message)

    def _finish(self, batch_id: uuid.UUID, *, status: str, **fields: object) -> bool:
        stmt = (
            update(ImportBatch)
            .where(
                ImportBatch.id == batch_id,
                ImportBatch.status.not_in(ImportStatus.TERMINAL),
            )
            .values(status=status, completed_at=datetime.now(timezone.utc), **fields)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount == 1
