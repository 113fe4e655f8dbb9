"""
app/mappers/forecast_mapper.py

Normalize model-extracted market report content into forecast datapoints and
a markdown summary.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from app.domain.market_report import ForecastPoint, MarketReport
from document_extraction.schema import MarketReportExtraction

NO_SUMMARY = "No summary generated"
MIN_YEAR = 1900
MAX_YEAR = 2200

_REGIONAL_SPEND: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(^|_)europe(_|$)"), "europe_subsea_spend_total_usd_bn"),
    (re.compile(r"(^|_)south_america(_|$)"), "south_america_subsea_spend_total_usd_bn"),
    (re.compile(r"(^|_)north_america(_|$)"), "north_america_subsea_spend_total_usd_bn"),
    (re.compile(r"(^|_)africa(_|$)"), "africa_subsea_spend_total_usd_bn"),
    (re.compile(r"(^|_)asia(_|$)|(^|_)australia(_|$)"), "asia_australia_subsea_spend_total_usd_bn"),
    (re.compile(r"(^|_)middle_east(_|$)|(^|_)russia(_|$)"), "middle_east_russia_subsea_spend_total_usd_bn"),
)

# (accepted key_figures keys, canonical metric, unit)
_KEY_FIGURE_FALLBACKS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("total_subsea_capex_usd_bn", "subsea_spend_usd_bn", "subsea_capex_usd_bn"), "subsea_spend_usd_bn", "USD bn"),
    (("xmt_forecast_units", "xmt_installations"), "xmt_installations", "units"),
    (("surf_km_forecast", "surf_km"), "surf_km", "km"),
    (("yoy_growth_pct", "subsea_capex_growth_yoy_pct"), "subsea_capex_growth_yoy_pct", "%"),
    (("brent_avg_usd_per_bbl", "brent_price_usd"), "brent_avg_usd_per_bbl", "USD/bbl"),
)

_METRIC_SEPARATORS = re.compile(r"[^a-z0-9]+")
_YEAR_IN_TEXT = re.compile(r"\b(?:19|20)\d{2}\b")
_BULLET_LINE = re.compile(r"^\s*(?:[-*•]|\d+\.)\s+(.+)$", re.MULTILINE)
_FIRST_SENTENCE = re.compile(r"^[^.!?]+[.!?]")


# ----------------------------------------------------------------------
# Scalars
# ----------------------------------------------------------------------


def normalize_metric_key(metric: str) -> str:
    return _METRIC_SEPARATORS.sub("_", metric.lower()).strip("_")


def to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if not cleaned:
            return None
        try:
            parsed = float(cleaned)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_year(value: Any) -> int | None:
    parsed = to_number(value)
    if parsed is None:
        return None
    year = math.floor(parsed + 0.5)
    return year if MIN_YEAR <= year <= MAX_YEAR else None


def normalize_forecast_metric(metric: str) -> str:
    normalized = normalize_metric_key(metric)
    if not normalized:
        return normalized

    def has(*tokens: str) -> bool:
        return any(token in normalized for token in tokens)

    if "subsea" in normalized and has("spend", "capex"):
        for pattern, regional_metric in _REGIONAL_SPEND:
            if pattern.search(normalized):
                return regional_metric

    if "subsea" in normalized and has("spend", "capex") and has("usd", "bn", "billion"):
        return "subsea_spend_usd_bn"
    if "xmt" in normalized and has("install", "unit", "count", "tree"):
        return "xmt_installations"
    if "surf" in normalized and has("km", "install", "line"):
        return "surf_km"
    if has("growth", "yoy") and has("subsea", "capex", "spend"):
        return "subsea_capex_growth_yoy_pct"
    if "brent" in normalized:
        return "brent_avg_usd_per_bbl"
    if "pipeline" in normalized and "km" in normalized:
        return "pipeline_km"
    return normalized


def normalize_forecast_unit(unit: Any) -> str:
    if not isinstance(unit, str):
        return ""
    cleaned = unit.strip()
    lowered = cleaned.lower()
    if not cleaned:
        return ""
    if "usd" in lowered and ("bn" in lowered or "billion" in lowered):
        return "USD bn"
    if lowered == "%" or "percent" in lowered or "pct" in lowered:
        return "%"
    if "km" in lowered:
        return "km"
    if "unit" in lowered:
        return "units"
    if "bbl" in lowered or "barrel" in lowered:
        return "USD/bbl"
    return cleaned


# ----------------------------------------------------------------------
# Forecasts
# ----------------------------------------------------------------------


def normalize_forecasts(entries: Iterable[Any]) -> list[ForecastPoint]:
    points: list[ForecastPoint] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        year = to_year(entry.get("year"))
        value = to_number(entry.get("value"))
        raw_metric = entry.get("metric")
        metric = normalize_forecast_metric(raw_metric) if isinstance(raw_metric, str) else ""
        if year is None or value is None or not metric:
            continue
        points.append(
            ForecastPoint(
                year=year,
                metric=metric,
                value=value,
                unit=normalize_forecast_unit(entry.get("unit")),
            )
        )
    return points


def key_figure_forecasts(key_figures: Mapping[str, Any], year: int) -> list[ForecastPoint]:
    """
    Build fallback datapoints for ``year`` from the report's key figures.
    """

    figures: dict[str, float] = {}
    for key, value in key_figures.items():
        number = to_number(value)
        if number is not None:
            figures[normalize_metric_key(str(key))] = number

    points: list[ForecastPoint] = []
    for keys, metric, unit in _KEY_FIGURE_FALLBACKS:
        for key in keys:
            value = figures.get(normalize_metric_key(key))
            if value is not None:
                points.append(ForecastPoint(year=year, metric=metric, value=value, unit=unit))
                break
    return points


def deduplicate_forecasts(points: Iterable[ForecastPoint]) -> list[ForecastPoint]:
    """Keep the last datapoint per (year, metric), in first-seen order."""

    by_key: dict[tuple[int, str], ForecastPoint] = {}
    for point in points:
        by_key[(point.year, point.metric)] = point
    return list(by_key.values())


def _year_match(text: str) -> int | None:
    match = _YEAR_IN_TEXT.search(text)
    return int(match.group(0)) if match else None


# ----------------------------------------------------------------------
# Summary
# ----------------------------------------------------------------------


def extract_summary_highlights(summary: str) -> list[str]:
    bullets = [line.strip() for line in _BULLET_LINE.findall(summary)]
    bullets = [line for line in bullets if len(line) > 16][:6]
    if bullets:
        return bullets

    highlights: list[str] = []
    for paragraph in re.split(r"\n\n+", summary):
        paragraph = paragraph.strip()
        if len(paragraph) <= 32:
            continue
        sentence = _FIRST_SENTENCE.match(paragraph)
        highlights.append(sentence.group(0).strip() if sentence else f"{paragraph[:160].strip()}…")
    return highlights[:5]


def build_summary_markdown(
    *,
    heading: str,
    report_title: str | None,
    summary: str,
    highlights: list[str],
    key_figures: Mapping[str, Any],
) -> str:
    sections = [f"## {heading}"]
    if report_title and report_title != heading:
        sections.append(f"### Report\n{report_title}")
    if highlights:
        sections.append("### Highlights\n" + "\n".join(f"- {line}" for line in highlights))
    if summary.strip():
        sections.append(f"### Executive Summary\n{summary.strip()}")
    sections.append(
        "### Key Figures\n```json\n" + json.dumps(dict(key_figures), indent=2) + "\n```"
    )
    return "\n\n".join(sections)


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def build_market_report(extraction: MarketReportExtraction, *, file_name: str) -> MarketReport:
    """
    Clean a raw extraction into forecasts, highlights and key figures.
    """

    summary = _clean_text(extraction.summary) or NO_SUMMARY
    report_period = _clean_text(extraction.report_period)
    report_title = _clean_text(extraction.report_title)

    highlights = [line.strip() for line in extraction.highlights if len(line.strip()) > 10][:6]
    if not highlights:
        highlights = extract_summary_highlights(summary)

    forecasts = normalize_forecasts(extraction.forecasts)
    if not forecasts:
        fallback_year = _year_match(report_period or report_title or file_name)
        if fallback_year is not None:
            forecasts = key_figure_forecasts(extraction.key_figures, fallback_year)

    return MarketReport(
        report_period=report_period,
        report_title=report_title,
        summary=summary,
        highlights=highlights,
        key_figures=dict(extraction.key_figures),
        forecasts=deduplicate_forecasts(forecasts),
    )


def market_report_markdown(report: MarketReport, *, file_name: str) -> str:
    return build_summary_markdown(
        heading=report.report_period or report.report_title or file_name,
        report_title=report.report_title,
        summary=report.summary or "",
        highlights=report.highlights,
        key_figures=report.key_figures,
    )
