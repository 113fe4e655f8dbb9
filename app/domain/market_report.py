"""
app/domain/market_report.py

Normalized market report content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FORECAST_CONFLICT_KEY: tuple[str, ...] = ("year", "metric")


@dataclass(frozen=True)
class ForecastPoint:
    year: int
    metric: str
    value: float
    unit: str | None = None
    source: str = "rystad_report"

    def to_record(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "metric": self.metric,
            "value": self.value,
            "unit": self.unit,
            "source": self.source,
        }


@dataclass(frozen=True)
class MarketReport:
    """
    Cleaned report: forecasts are deduplicated and highlights are filled.
    """

    report_period: str | None
    report_title: str | None
    summary: str | None
    highlights: list[str] = field(default_factory=list)
    key_figures: dict[str, Any] = field(default_factory=dict)
    forecasts: list[ForecastPoint] = field(default_factory=list)
