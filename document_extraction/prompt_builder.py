"""Prompt builder for document extraction."""

import json
from dataclasses import dataclass

CONTRACT_AWARDS = "contract_awards"
MARKET_REPORT = "market_report"

_CONTRACT_AWARDS_INSTRUCTIONS = """\
Extract ALL contract rows from this PDF table. The table has columns:
Leverandør (supplier), Operatør (operator), Verdi (value), Omfang (scope),
Region/Prosjekt (region/project), Segment, and Varighet (duration/contract period).

Return a JSON array of objects with these exact fields:
- supplier: string
- operator: string
- value: string (keep original format, e.g. "NOK 500M" or "USD 1.2B")
- scope: string (full description)
- region: string
- segment: string
- duration: string (contract duration/period, e.g. "2025-2028", "3 years",
  "36 months". Empty string if not found)

Extract EVERY row from ALL pages. Return ONLY the JSON array, no other text.
"""

_MARKET_REPORT_EXAMPLE = json.dumps(
    {
        "report_period": "Q1 2026",
        "report_title": "Subsea Market Report",
        "summary": "executive summary text",
        "highlights": ["bullet", "bullet"],
        "key_figures": {
            "total_subsea_capex_usd_bn": 54.3,
            "xmt_forecast_units": 1120,
            "surf_km_forecast": None,
            "yoy_growth_pct": None,
            "brent_avg_usd_per_bbl": None,
        },
        "forecasts": [
            {"year": 2026, "metric": "subsea_spend_usd_bn", "value": 54.3, "unit": "USD bn"},
            {"year": 2026, "metric": "xmt_installations", "value": 1120, "unit": "units"},
        ],
    },
    indent=2,
)

_MARKET_REPORT_INSTRUCTIONS = """\
Analyze this Subsea Market Report and return ONE valid JSON object shaped like
the example below.

## Example
```json
{example}
```

Rules:
- Extract as many yearly forecast datapoints as possible from charts/tables/text.
- Prefer these canonical metric names when possible:
  subsea_spend_usd_bn, xmt_installations, surf_km, subsea_capex_growth_yoy_pct,
  brent_avg_usd_per_bbl, pipeline_km
- Regional spend should use:
  europe_subsea_spend_total_usd_bn, south_america_subsea_spend_total_usd_bn,
  north_america_subsea_spend_total_usd_bn, africa_subsea_spend_total_usd_bn,
  asia_australia_subsea_spend_total_usd_bn, middle_east_russia_subsea_spend_total_usd_bn
- Use null for figures the report does not state.
- No markdown. No prose outside JSON.
"""


@dataclass(frozen=True)
class ExtractionPrompt:
    """A prompt plus the output kind it asks for."""

    kind: str
    text: str


class ExtractionPromptBuilder:
    """Builds the fixed instructions sent alongside a document."""

    def contract_awards(self) -> ExtractionPrompt:
        return ExtractionPrompt(kind=CONTRACT_AWARDS, text=_CONTRACT_AWARDS_INSTRUCTIONS)

    def market_report(self) -> ExtractionPrompt:
        return ExtractionPrompt(
            kind=MARKET_REPORT,
            text=_MARKET_REPORT_INSTRUCTIONS.format(example=_MARKET_REPORT_EXAMPLE),
        )
