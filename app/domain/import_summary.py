"""
app/domain/import_summary.py

Result types reported by the import pipeline.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class UpsertResult:
    """
    Imported/skipped counts for one chunked upsert call.
    """

    table: str
    imported: int = 0
    skipped: int = 0
    failed_chunks: int = 0


@dataclass
class BatchStats:
    """
    Running totals for one batch. ``total`` counts rows handed to the writer.
    """

    total: int = 0
    imported: int = 0
    skipped: int = 0
    tables: dict[str, UpsertResult] = field(default_factory=dict)

    def record(self, result: UpsertResult, *, rows: int, counted: bool = True) -> None:
        """
        Keep ``result`` per table; only ``counted`` writes feed the batch totals.
        """

        self.tables[result.table] = result
        if counted:
            self.total += rows
            self.imported += result.imported
            self.skipped += result.skipped


@dataclass(frozen=True)
class ImportResult:
    """
    Final outcome of ``process_job``.
    """

    job_id: uuid.UUID
    batch_id: uuid.UUID | None
    status: str
    file_type: str
    total: int
    imported: int
    skipped: int
    tables: dict[str, UpsertResult] = field(default_factory=dict)
    already_completed: bool = False
