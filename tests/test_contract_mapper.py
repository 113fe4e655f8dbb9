from __future__ import annotations

import datetime as dt
import unittest

from app.domain.source_rows import AwardForecastRow
from app.mappers.contract_mapper import (
    map_contract_award,
    map_contract_awards,
    map_segment,
    parse_contract_value,
    pdf_external_id,
    project_award_contract,
    project_award_contracts,
)
from db.models.contract import ContractSource, ContractType, PipelinePhase
from document_extraction.schema import ContractAwardRow


class TestForecastAwardProjection(unittest.TestCase):
    def test_projects_award_row_onto_feed_contract(self) -> None:
        row = AwardForecastRow(
            development_project="Alpha",
            asset="A1",
            country="NO",
            year=2027,
            operator="Equinor",
            surf_contractor="Subsea7",
            facility_category="Subsea tieback",
            xmts_awarded=6,
        )

        contract = project_award_contract(row)

        assert contract is not None
        self.assertEqual(contract.external_id, "rystad-award-2027-Alpha-A1")
        self.assertEqual(contract.date, dt.date(2027, 1, 1))
        self.assertEqual(contract.supplier, "Subsea7")
        self.assertEqual(contract.operator, "Equinor")
        self.assertEqual(contract.description, "6 XMTs awarded - Subsea tieback")
        self.assertEqual(contract.contract_type, ContractType.SUBSEA)
        self.assertEqual((contract.region, contract.country), ("NO", "NO"))
        self.assertEqual(contract.source, ContractSource.RYSTAD_FORECAST)
        self.assertEqual(contract.pipeline_phase, PipelinePhase.FEED)

    def test_defaults_for_missing_descriptive_fields(self) -> None:
        contract = project_award_contract(AwardForecastRow(development_project="Beta", year=2028))

        assert contract is not None
        self.assertEqual(contract.external_id, "rystad-award-2028-Beta-null")
        self.assertEqual(contract.supplier, "TBD")
        self.assertEqual(contract.operator, "Unknown")
        self.assertEqual(contract.description, "0 XMTs awarded - N/A")

    def test_unknown_project_yields_no_contract(self) -> None:
        rows = [AwardForecastRow(development_project="Unknown", year=2027, xmts_awarded=3)]

        self.assertEqual(project_award_contracts(rows), [])

    def test_row_without_year_yields_no_contract(self) -> None:
        self.assertIsNone(project_award_contract(AwardForecastRow(development_project="Alpha")))


class TestContractAwardMapping(unittest.TestCase):
    def test_maps_extracted_row(self) -> None:
        row = ContractAwardRow(
            supplier="Aker Solutions",
            operator="Equinor",
            value="NOK 500M",
            scope="SPS for Alpha phase 2",
            region="North Sea",
            segment="Subsea production systems",
            duration="2026-2028",
        )

        contract = map_contract_award(row, award_date=dt.date(2026, 3, 1))

        self.assertEqual(contract.date, dt.date(2026, 3, 1))
        self.assertEqual(contract.project_name, "North Sea")
        self.assertEqual(contract.description, "SPS for Alpha phase 2 | Varighet: 2026-2028")
        self.assertEqual(contract.contract_type, ContractType.SPS)
        self.assertEqual(contract.estimated_value_usd, 500_000_000)
        self.assertEqual(contract.source, ContractSource.RYSTAD_AWARDS)
        self.assertEqual(contract.pipeline_phase, PipelinePhase.AWARDED)
        self.assertTrue(contract.external_id.startswith("rystad-pdf-"))

    def test_blank_row_falls_back_to_unknown(self) -> None:
        contract = map_contract_award(ContractAwardRow(), award_date=dt.date(2026, 1, 1))

        self.assertEqual(contract.supplier, "Unknown")
        self.assertEqual(contract.operator, "Unknown")
        self.assertEqual(contract.project_name, "Unknown")
        self.assertEqual(contract.description, "")
        self.assertEqual(contract.contract_type, ContractType.OTHER)
        self.assertIsNone(contract.estimated_value_usd)

    def test_external_id_is_stable_and_ignores_scope_after_100_chars(self) -> None:
        base = ContractAwardRow(supplier="S", operator="O", scope="x" * 100 + "tail one")
        other = ContractAwardRow(supplier="S", operator="O", scope="x" * 100 + "tail two", value="1")

        self.assertEqual(pdf_external_id(base), pdf_external_id(other))
        self.assertEqual(len(pdf_external_id(base)), len("rystad-pdf-") + 16)

    def test_map_contract_awards_defaults_to_today(self) -> None:
        contracts = map_contract_awards([ContractAwardRow(supplier="S")])

        self.assertEqual(contracts[0].date, dt.date.today())


class TestSegmentAndValueParsing(unittest.TestCase):
    def test_map_segment_keywords(self) -> None:
        self.assertEqual(map_segment("EPCI contract"), ContractType.EPCI)
        self.assertEqual(map_segment("Subsea"), ContractType.SPS)
        self.assertEqual(map_segment("SPS"), ContractType.SPS)
        self.assertEqual(map_segment("SURF"), ContractType.SURF)
        self.assertEqual(map_segment("Drilling"), ContractType.OTHER)
        self.assertEqual(map_segment(None), ContractType.OTHER)

    def test_parse_contract_value_multipliers(self) -> None:
        self.assertEqual(parse_contract_value("USD 1.2B"), 1_200_000_000)
        self.assertEqual(parse_contract_value("NOK 500M"), 500_000_000)
        self.assertEqual(parse_contract_value("250k"), 250_000)
        self.assertEqual(parse_contract_value("1,500"), 1500)

    def test_parse_contract_value_without_digits(self) -> None:
        self.assertIsNone(parse_contract_value("undisclosed"))
        self.assertIsNone(parse_contract_value(""))
        self.assertIsNone(parse_contract_value(None))


if __name__ == "__main__":
    unittest.main()
