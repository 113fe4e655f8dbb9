"""
Repository-layer exceptions for import, storage and datastore flows.
"""

from __future__ import annotations


class ImportRepositoryError(Exception):
    """Base exception for import repository failures."""


class UploadValidationError(ImportRepositoryError):
    """Raised when a queued upload payload fails validation."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class FileStorageError(ImportRepositoryError):
    """Raised when storing or reading an uploaded file fails."""


class DatastoreWriteError(ImportRepositoryError):
    """Raised when one upsert statement cannot be written."""

    def __init__(self, *, table: str, row_count: int, message: str) -> None:
        super().__init__(f"Upsert into {table} failed for {row_count} row(s): {message}")
        self.table = table
        self.row_count = row_count


class ImportJobNotFoundError(ImportRepositoryError):
    """Raised when a referenced import job does not exist."""


class UnsupportedImportTypeError(ImportRepositoryError):
    """Raised when a job carries a file type no adapter handles."""


class ImportJobClaimError(ImportRepositoryError):
    """Raised when the pending → processing claim is lost to another worker."""
