"""
Typed DTOs used by repository import/storage flows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredFileMetadata:
    """
    Metadata produced by the storage backend after saving a file.
    """

    bucket: str
    file_name: str
    storage_path: str
    mime_type: str | None
    file_size_bytes: int
    checksum: str
    stored_at: datetime


@dataclass(frozen=True)
class QueuedUpload:
    """
    Validated location of a file waiting in object storage.
    """

    file_name: str
    storage_bucket: str
    storage_path: str
    file_size_bytes: int


@dataclass(frozen=True)
class BatchCounts:
    """
    Final record counts written onto a terminal batch and job.
    """

    total: int
    imported: int
    skipped: int
