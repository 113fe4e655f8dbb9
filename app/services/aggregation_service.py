"""
app/services/aggregation_service.py

Project merge engine: folds the four source-row shapes of one batch into
project aggregates and flushes them as upserts.

Fold rules
----------
Rows are visited in the order installations, lines, units, awards.

    new key        – seed descriptive fields from the row; first_year and
                     last_year both start at the row's year
    existing key   – widen first_year/last_year when the row has a year;
                     descriptive fields are never overwritten
    counters       – installations add xmt_count, lines add km_surf_lines to
                     surf_km, units add unit_count to subsea_unit_count;
                     awards only widen the year range

Write policy
------------
``replace`` overwrites the stored project with the batch aggregate, so a full
re-import of the same file is idempotent. ``accumulate`` adds the batch
counters to the stored ones and widens the stored year range, for
incremental files that never repeat rows.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Final

from app.domain.import_summary import UpsertResult
from app.domain.project import PROJECT_CONFLICT_KEY, PROJECT_COUNTERS, ProjectAggregate, ProjectKey
from app.domain.source_rows import SHAPE_ORDER, ProjectFacts, SourceShape
from app.repositories.chunked_upsert_repository import ChunkedUpsertRepository
from db.repositories.datastore import AccumulateRule, ConflictPolicy

logger = logging.getLogger(__name__)

PROJECT_TABLE: Final[str] = "projects"

MERGE_POLICY_REPLACE: Final[str] = "replace"
MERGE_POLICY_ACCUMULATE: Final[str] = "accumulate"

PROJECT_ACCUMULATE_RULE: Final[AccumulateRule] = AccumulateRule(
    additive=PROJECT_COUNTERS,
    least=("first_year",),
    greatest=("last_year",),
)


def conflict_policy_for(merge_policy: str) -> ConflictPolicy:
    """
    Translate the configured project merge policy into a write policy.
    """

    normalized = merge_policy.strip().lower()
    if normalized == MERGE_POLICY_REPLACE:
        return ConflictPolicy.UPDATE
    if normalized == MERGE_POLICY_ACCUMULATE:
        return ConflictPolicy.ACCUMULATE
    raise ValueError(
        f"Unknown project merge policy {merge_policy!r}; "
        f"expected {MERGE_POLICY_REPLACE!r} or {MERGE_POLICY_ACCUMULATE!r}."
    )


def _seed(row: ProjectFacts) -> ProjectAggregate:
    return ProjectAggregate(
        development_project=row.development_project,
        asset=row.asset,
        country=row.country,
        continent=getattr(row, "continent", None),
        operator=row.operator,
        surf_contractor=row.surf_contractor,
        facility_category=row.facility_category,
        field_type=row.field_type,
        water_depth_category=row.water_depth_category,
        field_size_category=getattr(row, "field_size_category", None),
        first_year=row.year,
        last_year=row.year,
    )


def fold_projects(
    rows_by_shape: Mapping[SourceShape, Iterable[ProjectFacts]],
) -> dict[ProjectKey, ProjectAggregate]:
    """
    Fold one batch of normalized rows into project aggregates.

    Parameters
    ----------
    rows_by_shape:
        Normalized rows per shape. Missing shapes are treated as empty.

    Returns
    -------
    dict[ProjectKey, ProjectAggregate]
        Aggregates in first-seen order.
    """

    projects: dict[ProjectKey, ProjectAggregate] = {}
    for shape in SHAPE_ORDER:
        for row in rows_by_shape.get(shape, ()):
            key = ProjectKey(row.development_project, row.asset, row.country)
            aggregate = projects.get(key)
            if aggregate is None:
                aggregate = _seed(row)
                projects[key] = aggregate
            else:
                aggregate.observe_year(row.year)

            if row.contribution is not None:
                aggregate.add(row.contribution[1], row.counter_value())
    return projects


class ProjectAggregationService:
    """
    Folds a batch into projects and writes them through the chunked engine.

    Parameters
    ----------
    writer:
        Chunked upsert engine bound to the datastore.
    conflict_policy:
        ``ConflictPolicy.UPDATE`` (replace) or ``ConflictPolicy.ACCUMULATE``.
    """

    def __init__(
        self,
        writer: ChunkedUpsertRepository,
        *,
        conflict_policy: ConflictPolicy = ConflictPolicy.UPDATE,
    ) -> None:
        if conflict_policy is ConflictPolicy.IGNORE:
            raise ValueError("Project aggregates cannot be written with the ignore policy.")
        self._writer = writer
        self._conflict_policy = conflict_policy

    def aggregate(
        self,
        rows_by_shape: Mapping[SourceShape, Sequence[ProjectFacts]],
    ) -> tuple[list[ProjectAggregate], UpsertResult]:
        projects = list(fold_projects(rows_by_shape).values())
        logger.info(
            "Folded %s project(s) from %s source row(s)",
            len(projects),
            sum(len(rows) for rows in rows_by_shape.values()),
        )
        result = self._writer.upsert(
            PROJECT_TABLE,
            [project.to_record() for project in projects],
            conflict_columns=PROJECT_CONFLICT_KEY,
            policy=self._conflict_policy,
            accumulate=PROJECT_ACCUMULATE_RULE,
            additive_columns=PROJECT_COUNTERS,
        )
        return projects, result
