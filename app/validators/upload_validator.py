"""
app/validators/upload_validator.py

Validation for files queued from object storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from db.models.import_batch import ImportFileType
from db.repositories.errors import UploadValidationError
from db.repositories.types import QueuedUpload

MAX_FILE_NAME_LENGTH = 255
MAX_STORAGE_PATH_LENGTH = 1024

# Legacy BIFF .xls is not readable by the openpyxl engine.
EXCEL_EXTENSIONS: tuple[str, ...] = (".xlsx",)
PDF_EXTENSIONS: tuple[str, ...] = (".pdf",)

_MARKET_REPORT_MARKERS: tuple[str, ...] = ("market report", "subsea market")


@dataclass(frozen=True)
class UploadRules:
    allowed_extensions: tuple[str, ...]
    max_bytes: int


def _has_path_traversal(path: str) -> bool:
    return ".." in path or path.startswith("/") or path.startswith("\\")


def _extension(file_name: str) -> str:
    parts = file_name.lower().split(".")
    if len(parts) < 2:
        return ""
    return f".{parts[-1]}"


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


class UploadValidator:
    """
    Validates queue payloads for files already placed in object storage.
    """

    def __init__(self, *, storage_bucket: str = "imports") -> None:
        self._storage_bucket = storage_bucket

    def validate(self, payload: Mapping[str, Any], rules: UploadRules) -> QueuedUpload:
        """
        Return the normalized upload or raise ``UploadValidationError``.

        Oversized files fail with 413 and disallowed extensions with 415;
        every other problem is a 400.
        """

        file_name = _clean(payload.get("file_name"))
        storage_path = _clean(payload.get("storage_path"))
        storage_bucket = _clean(payload.get("storage_bucket")) or self._storage_bucket
        file_size_bytes = payload.get("file_size_bytes")

        if not file_name or not storage_path:
            raise UploadValidationError("Missing file_name or storage_path")
        if len(storage_path) > MAX_STORAGE_PATH_LENGTH or _has_path_traversal(storage_path):
            raise UploadValidationError("Invalid storage_path")
        if storage_bucket != self._storage_bucket:
            raise UploadValidationError("Invalid storage_bucket")
        self.validate_file(file_name=file_name, file_size_bytes=file_size_bytes, rules=rules)

        return QueuedUpload(
            file_name=file_name,
            storage_bucket=storage_bucket,
            storage_path=storage_path,
            file_size_bytes=file_size_bytes,
        )

    def validate_file(self, *, file_name: str, file_size_bytes: Any, rules: UploadRules) -> None:
        """
        Check size and extension for a file about to be stored or queued.
        """

        if not file_name.strip():
            raise UploadValidationError("Missing file_name")
        if len(file_name) > MAX_FILE_NAME_LENGTH:
            raise UploadValidationError("Invalid file_name: too long")
        if (
            isinstance(file_size_bytes, bool)
            or not isinstance(file_size_bytes, int)
            or file_size_bytes <= 0
        ):
            raise UploadValidationError("Missing or invalid file_size_bytes")
        if file_size_bytes > rules.max_bytes:
            raise UploadValidationError(
                f"File too large. Maximum allowed is {round(rules.max_bytes / 1024 / 1024)}MB",
                status_code=413,
            )

        allowed = tuple(extension.lower() for extension in rules.allowed_extensions)
        if _extension(file_name) not in allowed:
            raise UploadValidationError(
                f"Invalid file type. Allowed: {', '.join(allowed)}",
                status_code=415,
            )


def detect_pdf_type(file_name: str) -> str:
    """
    Route a PDF by name: market reports by marker text, otherwise contract awards.
    """

    lowered = file_name.lower()
    if any(marker in lowered for marker in _MARKET_REPORT_MARKERS):
        return ImportFileType.PDF_MARKET_REPORT
    return ImportFileType.PDF_CONTRACT_AWARDS
