"""
app/mappers/sheet_classifier.py

Resolve logical sheet roles to workbook sheet names.

Source workbooks drift (trailing dates, typos), so roles are matched by
case-insensitive prefix. The first sheet that matches any prefix wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.source_rows import SHAPE_ORDER, SourceShape


@dataclass(frozen=True)
class SheetRole:
    shape: SourceShape
    prefixes: tuple[str, ...]


DEFAULT_SHEET_ROLES: tuple[SheetRole, ...] = (
    SheetRole(SourceShape.INSTALLATIONS, ("XMTs",)),
    SheetRole(SourceShape.LINES, ("Surf lines",)),
    SheetRole(SourceShape.UNITS, ("Subsea units",)),
    SheetRole(SourceShape.AWARDS, ("Upcomming awards", "Upcoming awards")),
)


def find_sheet(sheet_names: Sequence[str], prefixes: Sequence[str]) -> str | None:
    lowered = [prefix.lower() for prefix in prefixes]
    for name in sheet_names:
        candidate = name.lower()
        if any(candidate.startswith(prefix) for prefix in lowered):
            return name
    return None


def classify_sheets(
    sheet_names: Sequence[str],
    roles: Sequence[SheetRole] = DEFAULT_SHEET_ROLES,
) -> dict[SourceShape, str | None]:
    """
    Map every role to its sheet name (or None), in aggregation fold order.
    """

    by_shape = {role.shape: find_sheet(sheet_names, role.prefixes) for role in roles}
    return {shape: by_shape.get(shape) for shape in SHAPE_ORDER}
