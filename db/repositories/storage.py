"""
Storage backend abstractions for uploaded import files.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from mimetypes import guess_type
from pathlib import Path, PurePosixPath
from typing import Protocol

from db.repositories.errors import FileStorageError
from db.repositories.types import StoredFileMetadata


class FileStorageBackend(Protocol):
    """
    Object storage used by the import pipeline.

    Files are addressed by (bucket, path); paths are relative and posix-style.
    """

    def save(
        self,
        *,
        bucket: str,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> StoredFileMetadata:
        ...

    def read(self, *, bucket: str, storage_path: str) -> bytes:
        ...


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    if not safe_name:
        raise FileStorageError("Invalid file name.")
    return safe_name


def _safe_relative_path(storage_path: str) -> PurePosixPath:
    candidate = PurePosixPath(storage_path.replace("\\", "/"))
    if candidate.is_absolute() or ".." in candidate.parts or not candidate.parts:
        raise FileStorageError(f"Invalid storage path: {storage_path!r}")
    return candidate


class LocalFileStorage:
    """
    Local filesystem storage backend, one directory per bucket.
    """

    def __init__(self, root_dir: str | Path = "data/imports") -> None:
        self._root_dir = Path(root_dir)

    def _bucket_dir(self, bucket: str) -> Path:
        safe_bucket = Path(bucket).name.strip()
        if not safe_bucket:
            raise FileStorageError("Invalid storage bucket.")
        return self._root_dir / safe_bucket

    def save(
        self,
        *,
        bucket: str,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> StoredFileMetadata:
        safe_file_name = _sanitize_file_name(file_name)
        stored_at = datetime.now(timezone.utc)

        relative_path = (
            PurePosixPath(stored_at.strftime("%Y"))
            / stored_at.strftime("%m")
            / f"{uuid.uuid4().hex}_{safe_file_name}"
        )
        absolute_path = self._bucket_dir(bucket) / Path(*relative_path.parts)
        absolute_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = absolute_path.with_suffix(f"{absolute_path.suffix}.tmp")
        try:
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(absolute_path)
        except OSError as exc:
            raise FileStorageError("Failed to write uploaded file to storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StoredFileMetadata(
            bucket=bucket,
            file_name=safe_file_name,
            storage_path=relative_path.as_posix(),
            mime_type=content_type or guess_type(safe_file_name)[0],
            file_size_bytes=len(content),
            checksum=hashlib.sha256(content).hexdigest(),
            stored_at=stored_at,
        )

    def read(self, *, bucket: str, storage_path: str) -> bytes:
        relative_path = _safe_relative_path(storage_path)
        target = self._bucket_dir(bucket) / Path(*relative_path.parts)
        if not target.is_file():
            raise FileStorageError(f"Stored file not found: {bucket}/{storage_path}")
        try:
            return target.read_bytes()
        except OSError as exc:
            raise FileStorageError(f"Failed to read {bucket}/{storage_path}.") from exc
