"""
app/mappers package marker.
"""

from app.mappers.contract_mapper import map_contract_awards, project_award_contracts
from app.mappers.forecast_mapper import build_market_report, market_report_markdown
from app.mappers.row_normalizer import normalize_rows
from app.mappers.sheet_classifier import DEFAULT_SHEET_ROLES, SheetRole, classify_sheets

__all__ = [
    "DEFAULT_SHEET_ROLES",
    "SheetRole",
    "build_market_report",
    "classify_sheets",
    "map_contract_awards",
    "market_report_markdown",
    "normalize_rows",
    "project_award_contracts",
]
