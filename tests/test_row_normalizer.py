from __future__ import annotations

import math
import unittest
import uuid

from app.domain.source_rows import AwardForecastRow, InstallationRow, LineRow, SourceShape, UnitRow
from app.mappers.row_normalizer import (
    normalize_award_row,
    normalize_header,
    normalize_installation_row,
    normalize_line_row,
    normalize_rows,
    normalize_unit_row,
    to_float,
    to_int,
    to_str,
)


class TestScalarCoercion(unittest.TestCase):
    def test_to_str_trims_and_treats_blank_as_absent(self) -> None:
        self.assertEqual(to_str("  Alpha  "), "Alpha")
        self.assertIsNone(to_str("   "))
        self.assertIsNone(to_str(None))
        self.assertIsNone(to_str(math.nan))

    def test_to_str_renders_integral_floats_without_fraction(self) -> None:
        self.assertEqual(to_str(2024.0), "2024")
        self.assertEqual(to_str(12.5), "12.5")

    def test_to_float_parses_numeric_text(self) -> None:
        self.assertEqual(to_float("12.75"), 12.75)
        self.assertEqual(to_float(" 3 "), 3.0)
        self.assertEqual(to_float(7), 7.0)

    def test_to_float_rejects_non_numeric_and_non_finite(self) -> None:
        self.assertIsNone(to_float("abc"))
        self.assertIsNone(to_float(""))
        self.assertIsNone(to_float(math.inf))
        self.assertIsNone(to_float(math.nan))
        self.assertIsNone(to_float(True))

    def test_to_int_rounds_half_up(self) -> None:
        self.assertEqual(to_int(2.5), 3)
        self.assertEqual(to_int("3.4"), 3)
        self.assertEqual(to_int(-0.5), 0)
        self.assertEqual(to_int(2024), 2024)
        self.assertIsNone(to_int("n/a"))

    def test_normalize_header_ignores_case_spacing_and_punctuation(self) -> None:
        self.assertEqual(normalize_header(" XMTs installed (also future) "), "xmtsinstalledalsofuture")
        self.assertEqual(normalize_header("Development Project"), normalize_header("development_project"))


class TestShapeNormalizers(unittest.TestCase):
    def test_installation_row_maps_every_column(self) -> None:
        row = normalize_installation_row(
            {
                "Year": 2024.0,
                "Country": "NO",
                "Continent": "Europe",
                "Development Project": " Alpha ",
                "Asset": "A1",
                "Operator": "Equinor",
                "SURF Installation Contractor": "Subsea7",
                "Facility Category": "Subsea tieback",
                "Field Type Category": "Oil",
                "Water Depth Category": "Shallow",
                "Distance To Tie In Group": "0-10 km",
                "XMT Contract Award Year": "2022",
                "XMT Contract Type": "Frame",
                "XMT Purpose": "Production",
                "XMT State": "Installed",
                "XMTs installed (also future)": 3.0,
            }
        )

        self.assertIsInstance(row, InstallationRow)
        assert row is not None
        self.assertEqual(row.development_project, "Alpha")
        self.assertEqual(row.year, 2024)
        self.assertEqual(row.surf_contractor, "Subsea7")
        self.assertEqual(row.field_type, "Oil")
        self.assertEqual(row.distance_group, "0-10 km")
        self.assertEqual(row.contract_award_year, 2022)
        self.assertEqual(row.xmt_count, 3)

    def test_missing_discriminators_default_to_empty_string(self) -> None:
        row = normalize_installation_row({"Development Project": "Alpha"})

        assert row is not None
        self.assertEqual(row.purpose, "")
        self.assertEqual(row.state, "")
        self.assertIsNone(row.xmt_count)
        self.assertIsNone(row.year)

    def test_blank_project_drops_the_row(self) -> None:
        self.assertIsNone(normalize_installation_row({"Development Project": "   ", "Year": 2024}))
        self.assertIsNone(normalize_line_row({"Year": 2024}))
        self.assertIsNone(normalize_unit_row({"Development Project": None}))
        self.assertIsNone(normalize_award_row({"Development Project": math.nan}))

    def test_headers_are_matched_tolerantly(self) -> None:
        row = normalize_line_row(
            {
                "development project": "Beta",
                "surf line design category": "Flexible",
                "KM SURF LINES": "4.25",
            }
        )

        self.assertIsInstance(row, LineRow)
        assert row is not None
        self.assertEqual(row.design_category, "Flexible")
        self.assertEqual(row.line_group, "")
        self.assertEqual(row.km_surf_lines, 4.25)

    def test_malformed_numbers_become_absent(self) -> None:
        row = normalize_unit_row(
            {"Development Project": "Gamma", "Subsea Units": "several", "Year": "soon"}
        )

        self.assertIsInstance(row, UnitRow)
        assert row is not None
        self.assertIsNone(row.unit_count)
        self.assertIsNone(row.year)

    def test_award_row_keeps_field_size_and_awarded_count(self) -> None:
        row = normalize_award_row(
            {
                "Development Project": "Delta",
                "Year": 2027,
                "Field Size Category": "Large",
                "XMTs Awarded": "6",
            }
        )

        self.assertIsInstance(row, AwardForecastRow)
        assert row is not None
        self.assertEqual(row.field_size_category, "Large")
        self.assertEqual(row.xmts_awarded, 6)

    def test_normalize_rows_filters_and_keeps_order(self) -> None:
        rows = normalize_rows(
            SourceShape.INSTALLATIONS,
            [
                {"Development Project": "Alpha"},
                {"Development Project": ""},
                {"Development Project": "Beta"},
            ],
        )

        self.assertEqual([row.development_project for row in rows], ["Alpha", "Beta"])

    def test_to_record_carries_batch_id_and_table_columns(self) -> None:
        batch_id = uuid.uuid4()
        row = normalize_unit_row({"Development Project": "Alpha", "Subsea Units": 2})
        assert row is not None

        record = row.to_record(batch_id)

        self.assertEqual(record["import_batch_id"], batch_id)
        self.assertEqual(record["unit_count"], 2)
        self.assertEqual(record["unit_category"], "")
        self.assertEqual(UnitRow.table, "subsea_unit_data")


if __name__ == "__main__":
    unittest.main()
