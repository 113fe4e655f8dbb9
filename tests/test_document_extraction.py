import json

import pytest

from document_extraction.adapter import BaseExtractionAdapter, MockExtractionAdapter
from document_extraction.extractor import DocumentExtractor
from document_extraction.prompt_builder import CONTRACT_AWARDS, MARKET_REPORT, ExtractionPrompt
from document_extraction.retry import ExtractionRetryExhaustedError, extract_with_retry
from document_extraction.schema import ContractAwardRow, MarketReportExtraction
from document_extraction.validator import (
    ExtractionOutputValidationError,
    validate_contract_rows,
    validate_market_report,
)


class _FailingAdapter(BaseExtractionAdapter):
    def extract(self, *, document: bytes, file_name: str, prompt: ExtractionPrompt) -> str:
        raise RuntimeError("connection reset")


class _SequenceAdapter(BaseExtractionAdapter):
    def __init__(self, responses: list) -> None:
        self._responses = list(responses)
        self.calls = 0

    def extract(self, *, document: bytes, file_name: str, prompt: ExtractionPrompt) -> str:
        self.calls += 1
        return self._responses.pop(0)


def test_contract_rows_accept_fenced_json() -> None:
    raw = '```json\n[{"supplier": "Aker", "value": 120}]\n```'

    rows = validate_contract_rows(raw)

    assert rows == [ContractAwardRow(supplier="Aker", value="120")]


def test_contract_rows_found_inside_prose() -> None:
    raw = 'Here are the rows: [{"supplier": "A [b]", "segment": null}, "noise"] Hope this helps.'

    rows = validate_contract_rows(raw)

    assert len(rows) == 1
    assert rows[0].supplier == "A [b]"
    assert rows[0].segment == ""


def test_contract_rows_reject_unparseable_output() -> None:
    with pytest.raises(ExtractionOutputValidationError) as exc_info:
        validate_contract_rows("I could not read the table.")

    assert exc_info.value.stage == "json_parse"


def test_market_report_rejects_array() -> None:
    with pytest.raises(ExtractionOutputValidationError) as exc_info:
        validate_market_report("[1, 2]")

    assert exc_info.value.stage == "json_parse"


def test_market_report_tolerates_wrong_field_types() -> None:
    raw = json.dumps(
        {
            "report_period": 2026,
            "summary": "Spend grows.",
            "highlights": ["ok", 3],
            "key_figures": [],
            "forecasts": {"year": 2026},
        }
    )

    report = validate_market_report(raw)

    assert report.report_period is None
    assert report.summary == "Spend grows."
    assert report.highlights == ["ok"]
    assert report.key_figures == {}
    assert report.forecasts == []


def test_retry_succeeds_on_second_attempt() -> None:
    adapter = _SequenceAdapter(["not json", '[{"supplier": "Aker"}]'])

    rows = extract_with_retry(
        adapter,
        document=b"%PDF",
        file_name="awards.pdf",
        prompt=ExtractionPrompt(kind=CONTRACT_AWARDS, text="rows"),
        validate=validate_contract_rows,
        max_retries=1,
    )

    assert adapter.calls == 2
    assert rows[0].supplier == "Aker"


def test_retry_exhaustion_records_history() -> None:
    adapter = _SequenceAdapter(["nope", "still nope", "never"])

    with pytest.raises(ExtractionRetryExhaustedError) as exc_info:
        extract_with_retry(
            adapter,
            document=b"%PDF",
            file_name="awards.pdf",
            prompt=ExtractionPrompt(kind=CONTRACT_AWARDS, text="rows"),
            validate=validate_contract_rows,
            max_retries=1,
        )

    assert exc_info.value.attempts == 2
    assert len(exc_info.value.history) == 2
    assert adapter.calls == 2


class TestDocumentExtractor:
    def test_persistent_garbage_yields_no_contract_rows(self) -> None:
        adapter = MockExtractionAdapter({CONTRACT_AWARDS: "no table here"})

        rows = DocumentExtractor(adapter, max_retries=1).extract_contract_rows(b"%PDF", "awards.pdf")

        assert rows == []
        assert adapter.calls == [("awards.pdf", CONTRACT_AWARDS), ("awards.pdf", CONTRACT_AWARDS)]

    def test_persistent_garbage_yields_empty_market_report(self) -> None:
        adapter = MockExtractionAdapter({MARKET_REPORT: "no report here"})

        report = DocumentExtractor(adapter, max_retries=0).extract_market_report(b"%PDF", "report.pdf")

        assert report == MarketReportExtraction.empty()
        assert len(adapter.calls) == 1

    def test_default_mock_responses_parse(self) -> None:
        extractor = DocumentExtractor(MockExtractionAdapter())

        rows = extractor.extract_contract_rows(b"%PDF", "awards.pdf")
        report = extractor.extract_market_report(b"%PDF", "report.pdf")

        assert rows[0].supplier == "Mock Subsea AS"
        assert rows[0].segment == "SURF"
        assert report.report_period == "Q1 2026"
        assert report.forecasts[0]["metric"] == "subsea_spend_usd_bn"

    def test_transport_errors_propagate(self) -> None:
        with pytest.raises(RuntimeError):
            DocumentExtractor(_FailingAdapter()).extract_contract_rows(b"%PDF", "awards.pdf")
