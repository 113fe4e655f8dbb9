"""
app/domain package marker.
"""

from app.domain.contract import CONTRACT_CONFLICT_KEY, ContractRecord
from app.domain.import_summary import BatchStats, ImportResult, UpsertResult
from app.domain.market_report import FORECAST_CONFLICT_KEY, ForecastPoint, MarketReport
from app.domain.project import PROJECT_CONFLICT_KEY, ProjectAggregate, ProjectKey
from app.domain.source_rows import (
    AwardForecastRow,
    InstallationRow,
    LineRow,
    ProjectFacts,
    SourceRow,
    SourceShape,
    UnitRow,
)

__all__ = [
    "AwardForecastRow",
    "BatchStats",
    "CONTRACT_CONFLICT_KEY",
    "ContractRecord",
    "FORECAST_CONFLICT_KEY",
    "ForecastPoint",
    "ImportResult",
    "InstallationRow",
    "LineRow",
    "MarketReport",
    "PROJECT_CONFLICT_KEY",
    "ProjectAggregate",
    "ProjectFacts",
    "ProjectKey",
    "SourceRow",
    "SourceShape",
    "UnitRow",
    "UpsertResult",
]
