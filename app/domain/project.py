"""
app/domain/project.py

In-memory project aggregate built while folding one batch.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, NamedTuple


class ProjectKey(NamedTuple):
    """Natural key: exact trimmed strings, no fuzzy matching."""

    development_project: str
    asset: str | None
    country: str | None

    def label(self) -> str:
        return f"{self.development_project}|{self.asset}|{self.country}"


PROJECT_CONFLICT_KEY: tuple[str, ...] = ("development_project", "asset", "country")
PROJECT_COUNTERS: tuple[str, ...] = ("xmt_count", "surf_km", "subsea_unit_count")


@dataclass
class ProjectAggregate:
    """
    Mutable aggregate owned by a single aggregation run.

    Descriptive fields are fixed by the first row seen for the key.
    """

    development_project: str
    asset: str | None
    country: str | None
    continent: str | None = None
    operator: str | None = None
    surf_contractor: str | None = None
    facility_category: str | None = None
    field_type: str | None = None
    water_depth_category: str | None = None
    field_size_category: str | None = None
    xmt_count: int = 0
    surf_km: float = 0
    subsea_unit_count: int = 0
    first_year: int | None = None
    last_year: int | None = None

    @property
    def key(self) -> ProjectKey:
        return ProjectKey(self.development_project, self.asset, self.country)

    def observe_year(self, year: int | None) -> None:
        if year is None:
            return
        if self.first_year is None or year < self.first_year:
            self.first_year = year
        if self.last_year is None or year > self.last_year:
            self.last_year = year

    def add(self, counter: str, amount: float) -> None:
        setattr(self, counter, getattr(self, counter) + amount)

    def to_record(self) -> dict[str, Any]:
        return asdict(self)
