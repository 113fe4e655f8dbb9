"""
app/repositories/chunked_upsert_repository.py

Bounded-chunk upserts with per-chunk failure isolation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.import_summary import UpsertResult
from db.repositories.datastore import AccumulateRule, ConflictPolicy, Datastore
from db.repositories.errors import DatastoreWriteError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500


def _conflict_value(value: Any) -> str:
    return "" if value is None else str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def deduplicate_by_conflict_key(
    rows: Sequence[Mapping[str, Any]],
    conflict_columns: Sequence[str],
    additive_columns: Sequence[str] = (),
) -> list[dict[str, Any]]:
    """
    Collapse rows that share a conflict key.

    ``additive_columns`` are summed when both sides are numeric; every other
    non-key value, numeric or not, is taken from the last row that carries it.
    Output keeps first-seen order.
    """

    merged: dict[tuple[str, ...], dict[str, Any]] = {}
    for row in rows:
        key = tuple(_conflict_value(row.get(column)) for column in conflict_columns)
        existing = merged.get(key)
        if existing is None:
            merged[key] = dict(row)
            continue
        for column, value in row.items():
            if column in conflict_columns:
                continue
            if column in additive_columns and _is_number(value) and _is_number(existing.get(column)):
                existing[column] += value
            elif value is not None:
                existing[column] = value
    return list(merged.values())


class ChunkedUpsertRepository:
    """
    Writes rows to one table in fixed-size chunks.

    A failed chunk is logged and counted as skipped; later chunks are still
    attempted. Chunks run sequentially. Rows sharing a conflict key inside a
    chunk are merged first, summing only ``additive_columns``.
    """

    def __init__(self, datastore: Datastore, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._datastore = datastore
        self._chunk_size = max(1, chunk_size)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        conflict_columns: Sequence[str],
        policy: ConflictPolicy = ConflictPolicy.UPDATE,
        accumulate: AccumulateRule | None = None,
        additive_columns: Sequence[str] = (),
    ) -> UpsertResult:
        imported = 0
        skipped = 0
        failed_chunks = 0

        for start in range(0, len(rows), self._chunk_size):
            raw_chunk = rows[start : start + self._chunk_size]
            chunk = deduplicate_by_conflict_key(raw_chunk, conflict_columns, additive_columns)
            try:
                imported += self._datastore.upsert(
                    table,
                    chunk,
                    conflict_columns=conflict_columns,
                    policy=policy,
                    accumulate=accumulate,
                )
            except DatastoreWriteError as exc:
                failed_chunks += 1
                skipped += len(chunk)
                logger.error(
                    "Chunk rows %s-%s of %s failed: %s",
                    start,
                    start + len(raw_chunk) - 1,
                    table,
                    exc,
                )

        if rows:
            logger.info(
                "Upserted %s: imported=%s skipped=%s (rows=%s, chunks_failed=%s)",
                table,
                imported,
                skipped,
                len(rows),
                failed_chunks,
            )
        return UpsertResult(
            table=table,
            imported=imported,
            skipped=skipped,
            failed_chunks=failed_chunks,
        )
