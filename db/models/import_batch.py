"""
db/models/import_batch.py

Import batch model: one row per ingested file, mutated only by the pipeline.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class ImportFileType:
    EXCEL_RYSTAD = "excel_rystad"
    PDF_CONTRACT_AWARDS = "pdf_contract_awards"
    PDF_MARKET_REPORT = "pdf_market_report"

    ALL: tuple[str, ...] = (EXCEL_RYSTAD, PDF_CONTRACT_AWARDS, PDF_MARKET_REPORT)


class ImportStatus:
    """Valid status values: pending → processing → completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    TERMINAL: frozenset[str] = frozenset({COMPLETED, FAILED})


class ImportBatch(Base, CreatedAtMixin):
    __tablename__ = "import_batches"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="excel_rystad, pdf_contract_awards, pdf_market_report",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportStatus.PENDING,
    )
    records_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    records_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (Index("ix_import_batches_status", "status"),)
