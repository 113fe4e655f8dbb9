"""
app/schemas package marker.
"""

from app.schemas.imports import (
    ImportJobQueuedResponse,
    ImportJobStatusResponse,
    ImportResultResponse,
    ImportStatusListResponse,
    ProcessJobRequest,
    QueueUploadRequest,
    TableCountsResponse,
)

__all__ = [
    "ImportJobQueuedResponse",
    "ImportJobStatusResponse",
    "ImportResultResponse",
    "ImportStatusListResponse",
    "ProcessJobRequest",
    "QueueUploadRequest",
    "TableCountsResponse",
]
