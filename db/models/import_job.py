"""
db/models/import_job.py

Queue-facing import job: file location, routing tag and lifecycle status.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin
from db.models.import_batch import ImportStatus


class ImportJob(Base, CreatedAtMixin):
    __tablename__ = "import_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Routing tag selecting the ingestion adapter",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportStatus.PENDING,
    )
    storage_bucket: Mapped[str] = mapped_column(String(100), nullable=False, default="imports")
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    import_batch_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("import_batches.id"),
        nullable=True,
    )
    records_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_import_jobs_status_created_at", "status", "created_at"),
        Index("ix_import_jobs_import_batch_id", "import_batch_id"),
    )
