"""
Repository layer exports.
"""

from db.repositories.datastore import AccumulateRule, ConflictPolicy, Datastore, SqlAlchemyDatastore
from db.repositories.document_repository import DocumentRepository
from db.repositories.errors import (
    DatastoreWriteError,
    FileStorageError,
    ImportJobClaimError,
    ImportJobNotFoundError,
    ImportRepositoryError,
    UnsupportedImportTypeError,
    UploadValidationError,
)
from db.repositories.import_batch_repository import ImportBatchRepository
from db.repositories.import_job_repository import ImportJobRepository
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import BatchCounts, QueuedUpload, StoredFileMetadata

__all__ = [
    "AccumulateRule",
    "ConflictPolicy",
    "Datastore",
    "SqlAlchemyDatastore",
    "DocumentRepository",
    "ImportBatchRepository",
    "ImportJobRepository",
    "FileStorageBackend",
    "LocalFileStorage",
    "BatchCounts",
    "QueuedUpload",
    "StoredFileMetadata",
    "ImportRepositoryError",
    "DatastoreWriteError",
    "FileStorageError",
    "ImportJobClaimError",
    "ImportJobNotFoundError",
    "UnsupportedImportTypeError",
    "UploadValidationError",
]
