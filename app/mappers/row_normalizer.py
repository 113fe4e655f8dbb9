"""
app/mappers/row_normalizer.py

Scalar coercion and per-shape projection of raw spreadsheet rows.

Malformed cells never raise: absence (None) is the only failure mode, and a
row whose project name is blank is dropped by returning None.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from app.domain.source_rows import (
    AwardForecastRow,
    InstallationRow,
    LineRow,
    SourceRow,
    SourceShape,
    UnitRow,
)

RawRow = Mapping[str, Any]


def normalize_header(header: str) -> str:
    """
    Normalize a column name for tolerant lookups.
    """

    return "".join(ch for ch in str(header).strip().lower() if ch.isalnum())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def to_str(value: Any) -> str | None:
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Spreadsheet readers hand back 2024.0 for integer cells.
        return str(int(value))
    return str(value).strip()


def to_float(value: Any) -> float | None:
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> int | None:
    number = to_float(value)
    if number is None:
        return None
    # Half-up, matching spreadsheet ROUND rather than banker's rounding.
    return math.floor(number + 0.5)


class _Cells:
    """
    Header lookup over one raw row: exact header first, then normalized.
    """

    def __init__(self, row: RawRow) -> None:
        self._row = row
        self._normalized: dict[str, Any] | None = None

    def __getitem__(self, header: str) -> Any:
        if header in self._row:
            return self._row[header]
        if self._normalized is None:
            self._normalized = {normalize_header(key): value for key, value in self._row.items()}
        return self._normalized.get(normalize_header(header))


def _common_fields(cells: _Cells) -> dict[str, Any] | None:
    development_project = to_str(cells["Development Project"])
    if development_project is None:
        return None
    return {
        "development_project": development_project,
        "year": to_int(cells["Year"]),
        "country": to_str(cells["Country"]),
        "asset": to_str(cells["Asset"]),
        "operator": to_str(cells["Operator"]),
        "surf_contractor": to_str(cells["SURF Installation Contractor"]),
        "facility_category": to_str(cells["Facility Category"]),
        "field_type": to_str(cells["Field Type Category"]),
        "water_depth_category": to_str(cells["Water Depth Category"]),
    }


def normalize_installation_row(row: RawRow) -> InstallationRow | None:
    cells = _Cells(row)
    common = _common_fields(cells)
    if common is None:
        return None
    return InstallationRow(
        **common,
        continent=to_str(cells["Continent"]),
        distance_group=to_str(cells["Distance To Tie In Group"]),
        contract_award_year=to_int(cells["XMT Contract Award Year"]),
        contract_type=to_str(cells["XMT Contract Type"]),
        purpose=to_str(cells["XMT Purpose"]) or "",
        state=to_str(cells["XMT State"]) or "",
        xmt_count=to_int(cells["XMTs installed (also future)"]),
    )


def normalize_line_row(row: RawRow) -> LineRow | None:
    cells = _Cells(row)
    common = _common_fields(cells)
    if common is None:
        return None
    return LineRow(
        **common,
        continent=to_str(cells["Continent"]),
        distance_group=to_str(cells["Distance To Tie In Group"]),
        design_category=to_str(cells["SURF Line Design Category"]) or "",
        line_group=to_str(cells["SURF Line Group"]) or "",
        km_surf_lines=to_float(cells["KM Surf Lines"]),
    )


def normalize_unit_row(row: RawRow) -> UnitRow | None:
    cells = _Cells(row)
    common = _common_fields(cells)
    if common is None:
        return None
    return UnitRow(
        **common,
        continent=to_str(cells["Continent"]),
        distance_group=to_str(cells["Distance To Tie In Group"]),
        unit_category=to_str(cells["Subsea Unit Category"]) or "",
        unit_count=to_int(cells["Subsea Units"]),
    )


def normalize_award_row(row: RawRow) -> AwardForecastRow | None:
    cells = _Cells(row)
    common = _common_fields(cells)
    if common is None:
        return None
    return AwardForecastRow(
        **common,
        field_size_category=to_str(cells["Field Size Category"]),
        xmts_awarded=to_int(cells["XMTs Awarded"]),
    )


NORMALIZERS: dict[SourceShape, Callable[[RawRow], SourceRow | None]] = {
    SourceShape.INSTALLATIONS: normalize_installation_row,
    SourceShape.LINES: normalize_line_row,
    SourceShape.UNITS: normalize_unit_row,
    SourceShape.AWARDS: normalize_award_row,
}


def normalize_rows(shape: SourceShape, rows: Iterable[RawRow]) -> list[SourceRow]:
    """
    Project raw rows into ``shape``, dropping rows without a project name.
    """

    normalize = NORMALIZERS[shape]
    normalized: list[SourceRow] = []
    for row in rows:
        record = normalize(row)
        if record is not None:
            normalized.append(record)
    return normalized
