"""
app/repositories package marker.
"""

from app.repositories.chunked_upsert_repository import (
    DEFAULT_CHUNK_SIZE,
    ChunkedUpsertRepository,
    deduplicate_by_conflict_key,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ChunkedUpsertRepository",
    "deduplicate_by_conflict_key",
]
