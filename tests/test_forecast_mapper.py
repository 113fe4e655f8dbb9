from __future__ import annotations

import pytest

from app.domain.market_report import ForecastPoint
from app.mappers.forecast_mapper import (
    NO_SUMMARY,
    build_market_report,
    deduplicate_forecasts,
    extract_summary_highlights,
    market_report_markdown,
    normalize_forecast_metric,
    normalize_forecast_unit,
    normalize_forecasts,
    to_year,
)
from document_extraction.schema import MarketReportExtraction


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Europe subsea spend (USD bn)", "europe_subsea_spend_total_usd_bn"),
        ("Asia & Australia subsea CAPEX", "asia_australia_subsea_spend_total_usd_bn"),
        ("Total subsea CAPEX USD bn", "subsea_spend_usd_bn"),
        ("XMT installations", "xmt_installations"),
        ("SURF km installed", "surf_km"),
        ("Subsea capex growth YoY", "subsea_capex_growth_yoy_pct"),
        ("Brent average price", "brent_avg_usd_per_bbl"),
        ("Pipeline km", "pipeline_km"),
        ("Rig Count!", "rig_count"),
    ],
)
def test_normalize_forecast_metric(raw: str, expected: str) -> None:
    assert normalize_forecast_metric(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("USD billion", "USD bn"),
        ("percent", "%"),
        ("KM", "km"),
        ("Units", "units"),
        ("USD per barrel", "USD/bbl"),
        ("tonnes", "tonnes"),
        (None, ""),
    ],
)
def test_normalize_forecast_unit(raw: object, expected: str) -> None:
    assert normalize_forecast_unit(raw) == expected


def test_to_year_rounds_and_bounds() -> None:
    assert to_year("2026.4") == 2026
    assert to_year(2025.5) == 2026
    assert to_year(1800) is None
    assert to_year("next year") is None


def test_normalize_forecasts_drops_malformed_entries() -> None:
    points = normalize_forecasts(
        [
            {"year": 2026, "metric": "XMT installations", "value": "1,250", "unit": "units"},
            {"year": 2026, "metric": "surf km", "value": "n/a"},
            {"year": None, "metric": "surf km", "value": 10},
            {"year": 2027, "metric": 42, "value": 10},
            "not an object",
        ]
    )

    assert points == [ForecastPoint(year=2026, metric="xmt_installations", value=1250.0, unit="units")]


def test_deduplicate_forecasts_last_wins() -> None:
    first = ForecastPoint(year=2026, metric="surf_km", value=1.0)
    second = ForecastPoint(year=2026, metric="surf_km", value=2.0)

    assert deduplicate_forecasts([first, second]) == [second]


class TestBuildMarketReport:
    def test_uses_key_figures_when_no_forecast_survives(self) -> None:
        extraction = MarketReportExtraction(
            report_period="Q1 2026",
            summary="Spend is up.",
            key_figures={"xmt_forecast_units": 320, "brent_price_usd": "78.5", "note": "n/a"},
            forecasts=[{"year": "soon", "metric": "x", "value": 1}],
        )

        report = build_market_report(extraction, file_name="report.pdf")

        assert report.forecasts == [
            ForecastPoint(year=2026, metric="xmt_installations", value=320.0, unit="units"),
            ForecastPoint(year=2026, metric="brent_avg_usd_per_bbl", value=78.5, unit="USD/bbl"),
        ]

    def test_year_fallback_reads_file_name_last(self) -> None:
        extraction = MarketReportExtraction(key_figures={"surf_km": 900})

        report = build_market_report(extraction, file_name="Subsea Market 2027.pdf")

        assert report.forecasts == [ForecastPoint(year=2027, metric="surf_km", value=900.0, unit="km")]

    def test_no_year_anywhere_means_no_fallback(self) -> None:
        extraction = MarketReportExtraction(key_figures={"surf_km": 900})

        assert build_market_report(extraction, file_name="report.pdf").forecasts == []

    def test_missing_summary_gets_placeholder(self) -> None:
        report = build_market_report(MarketReportExtraction.empty(), file_name="report.pdf")

        assert report.summary == NO_SUMMARY

    def test_short_highlights_are_dropped_and_capped(self) -> None:
        extraction = MarketReportExtraction(
            highlights=["short", *[f"Highlight number {index} for the year" for index in range(8)]],
        )

        report = build_market_report(extraction, file_name="report.pdf")

        assert len(report.highlights) == 6
        assert "short" not in report.highlights

    def test_markdown_contains_all_sections(self) -> None:
        extraction = MarketReportExtraction(
            report_period="Q1 2026",
            report_title="Subsea Market Report",
            summary="Subsea spend grows strongly in 2026 across all regions.",
            highlights=["Subsea spend grows strongly"],
            key_figures={"subsea_spend_usd_bn": 50},
        )
        report = build_market_report(extraction, file_name="report.pdf")

        markdown = market_report_markdown(report, file_name="report.pdf")

        assert markdown.startswith("## Q1 2026")
        assert "### Report\nSubsea Market Report" in markdown
        assert "### Highlights\n- Subsea spend grows strongly" in markdown
        assert "### Executive Summary" in markdown
        assert '"subsea_spend_usd_bn": 50' in markdown


class TestSummaryHighlights:
    def test_prefers_bullet_lines(self) -> None:
        summary = "Intro\n- Subsea spend rises 12% in 2026\n- short\n* XMT awards stay flat in the North Sea"

        assert extract_summary_highlights(summary) == [
            "Subsea spend rises 12% in 2026",
            "XMT awards stay flat in the North Sea",
        ]

    def test_falls_back_to_first_sentences_of_long_paragraphs(self) -> None:
        summary = (
            "Subsea spending will grow in 2026. Growth is led by Brazil.\n\n"
            "Tiny.\n\n"
            "Tree awards remain strong through the forecast period. More text."
        )

        assert extract_summary_highlights(summary) == [
            "Subsea spending will grow in 2026.",
            "Tree awards remain strong through the forecast period.",
        ]
