from __future__ import annotations

from app.domain.source_rows import SHAPE_ORDER, SourceShape
from app.mappers.sheet_classifier import SheetRole, classify_sheets, find_sheet


class TestFindSheet:
    def test_matches_prefix_case_insensitively(self) -> None:
        assert find_sheet(["notes", "xmts 04.2025"], ("XMTs",)) == "xmts 04.2025"

    def test_first_matching_sheet_wins(self) -> None:
        assert find_sheet(["Surf lines old", "Surf lines"], ("Surf lines",)) == "Surf lines old"

    def test_returns_none_without_match(self) -> None:
        assert find_sheet(["Summary"], ("XMTs",)) is None


class TestClassifySheets:
    def test_resolves_all_roles_including_misspelled_awards_sheet(self) -> None:
        sheets = [
            "Read me",
            "XMTs",
            "Surf lines",
            "Subsea units",
            "Upcomming awards 04.04.25",
        ]

        resolved = classify_sheets(sheets)

        assert resolved == {
            SourceShape.INSTALLATIONS: "XMTs",
            SourceShape.LINES: "Surf lines",
            SourceShape.UNITS: "Subsea units",
            SourceShape.AWARDS: "Upcomming awards 04.04.25",
        }

    def test_correctly_spelled_awards_sheet_is_accepted(self) -> None:
        resolved = classify_sheets(["Upcoming awards"])

        assert resolved[SourceShape.AWARDS] == "Upcoming awards"

    def test_missing_roles_map_to_none_in_fold_order(self) -> None:
        resolved = classify_sheets(["XMTs"])

        assert list(resolved) == list(SHAPE_ORDER)
        assert resolved[SourceShape.INSTALLATIONS] == "XMTs"
        assert resolved[SourceShape.LINES] is None
        assert resolved[SourceShape.UNITS] is None
        assert resolved[SourceShape.AWARDS] is None

    def test_custom_roles_override_defaults(self) -> None:
        roles = (SheetRole(SourceShape.LINES, ("Pipelines",)),)

        resolved = classify_sheets(["Pipelines 2025", "Surf lines"], roles)

        assert resolved[SourceShape.LINES] == "Pipelines 2025"
        assert resolved[SourceShape.INSTALLATIONS] is None
