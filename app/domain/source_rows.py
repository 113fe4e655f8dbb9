"""
app/domain/source_rows.py

Typed source rows, one class per spreadsheet shape.

Each shape knows its target table, its natural conflict key and which
project counter (if any) it feeds during aggregation.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar


class SourceShape(str, Enum):
    INSTALLATIONS = "installations"
    LINES = "lines"
    UNITS = "units"
    AWARDS = "awards"


@dataclass(frozen=True, kw_only=True)
class ProjectFacts:
    """
    Descriptive fields shared by every shape.
    """

    shape: ClassVar[SourceShape]
    table: ClassVar[str]
    conflict_key: ClassVar[tuple[str, ...]]
    # (row field, project counter) fed into the project aggregate, if any
    contribution: ClassVar[tuple[str, str] | None] = None
    # shape counters summed when rows collapse on the conflict key
    additive_columns: ClassVar[tuple[str, ...]] = ()

    development_project: str
    year: int | None = None
    country: str | None = None
    asset: str | None = None
    operator: str | None = None
    surf_contractor: str | None = None
    facility_category: str | None = None
    field_type: str | None = None
    water_depth_category: str | None = None

    def to_record(self, import_batch_id: uuid.UUID | None) -> dict[str, Any]:
        return {"import_batch_id": import_batch_id, **asdict(self)}

    def counter_value(self) -> float:
        if self.contribution is None:
            return 0
        return getattr(self, self.contribution[0]) or 0


@dataclass(frozen=True, kw_only=True)
class InstallationRow(ProjectFacts):
    """Subsea tree (XMT) installations."""

    shape: ClassVar[SourceShape] = SourceShape.INSTALLATIONS
    table: ClassVar[str] = "xmt_data"
    conflict_key: ClassVar[tuple[str, ...]] = (
        "year",
        "development_project",
        "asset",
        "purpose",
        "state",
    )
    contribution: ClassVar[tuple[str, str] | None] = ("xmt_count", "xmt_count")
    additive_columns: ClassVar[tuple[str, ...]] = ("xmt_count",)

    continent: str | None = None
    distance_group: str | None = None
    contract_award_year: int | None = None
    contract_type: str | None = None
    purpose: str = ""
    state: str = ""
    xmt_count: int | None = None


@dataclass(frozen=True, kw_only=True)
class LineRow(ProjectFacts):
    """SURF line lengths."""

    shape: ClassVar[SourceShape] = SourceShape.LINES
    table: ClassVar[str] = "surf_data"
    conflict_key: ClassVar[tuple[str, ...]] = (
        "year",
        "development_project",
        "asset",
        "design_category",
        "line_group",
    )
    contribution: ClassVar[tuple[str, str] | None] = ("km_surf_lines", "surf_km")
    additive_columns: ClassVar[tuple[str, ...]] = ("km_surf_lines",)

    continent: str | None = None
    distance_group: str | None = None
    design_category: str = ""
    line_group: str = ""
    km_surf_lines: float | None = None


@dataclass(frozen=True, kw_only=True)
class UnitRow(ProjectFacts):
    """Subsea unit counts."""

    shape: ClassVar[SourceShape] = SourceShape.UNITS
    table: ClassVar[str] = "subsea_unit_data"
    conflict_key: ClassVar[tuple[str, ...]] = (
        "year",
        "development_project",
        "asset",
        "unit_category",
    )
    contribution: ClassVar[tuple[str, str] | None] = ("unit_count", "subsea_unit_count")
    additive_columns: ClassVar[tuple[str, ...]] = ("unit_count",)

    continent: str | None = None
    distance_group: str | None = None
    unit_category: str = ""
    unit_count: int | None = None


@dataclass(frozen=True, kw_only=True)
class AwardForecastRow(ProjectFacts):
    """Upcoming XMT awards. Feeds the project year range only."""

    shape: ClassVar[SourceShape] = SourceShape.AWARDS
    table: ClassVar[str] = "upcoming_awards"
    conflict_key: ClassVar[tuple[str, ...]] = ("year", "development_project", "asset")
    additive_columns: ClassVar[tuple[str, ...]] = ("xmts_awarded",)

    field_size_category: str | None = None
    xmts_awarded: int | None = None


SourceRow = InstallationRow | LineRow | UnitRow | AwardForecastRow

ROW_TYPES: dict[SourceShape, type[ProjectFacts]] = {
    row_type.shape: row_type
    for row_type in (InstallationRow, LineRow, UnitRow, AwardForecastRow)
}

# Fold order used by the project aggregation.
SHAPE_ORDER: tuple[SourceShape, ...] = (
    SourceShape.INSTALLATIONS,
    SourceShape.LINES,
    SourceShape.UNITS,
    SourceShape.AWARDS,
)
