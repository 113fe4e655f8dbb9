"""
app/mappers/contract_mapper.py

Map forecast-award rows and extracted award-table rows to contract records.
"""

from __future__ import annotations

import datetime as dt
import hashlib
import re
from collections.abc import Iterable

from app.domain.contract import ContractRecord
from app.domain.source_rows import AwardForecastRow
from db.models.contract import ContractSource, ContractType, PipelinePhase
from document_extraction.schema import ContractAwardRow

UNKNOWN = "Unknown"

_VALUE_MULTIPLIERS: tuple[tuple[str, int], ...] = (
    ("b", 1_000_000_000),
    ("m", 1_000_000),
    ("k", 1_000),
)
_NON_NUMERIC = re.compile(r"[^0-9.]")


def award_external_id(row: AwardForecastRow) -> str:
    # A missing asset renders as "null" so ids match rows already stored under that form.
    asset = "null" if row.asset is None else row.asset
    return f"rystad-award-{row.year}-{row.development_project}-{asset}"


def project_award_contract(row: AwardForecastRow) -> ContractRecord | None:
    """
    Project one forecast-award row onto a feed-phase contract.

    Returns None for rows that cannot carry a contract: no usable project
    name, or no year to derive the award date from.
    """

    project_name = row.development_project or UNKNOWN
    if project_name == UNKNOWN or row.year is None:
        return None

    return ContractRecord(
        external_id=award_external_id(row),
        date=dt.date(row.year, 1, 1),
        supplier=row.surf_contractor or "TBD",
        operator=row.operator or UNKNOWN,
        project_name=project_name,
        description=f"{row.xmts_awarded or 0} XMTs awarded - {row.facility_category or 'N/A'}",
        contract_type=ContractType.SUBSEA,
        region=row.country,
        country=row.country,
        source=ContractSource.RYSTAD_FORECAST,
        pipeline_phase=PipelinePhase.FEED,
    )


def project_award_contracts(rows: Iterable[AwardForecastRow]) -> list[ContractRecord]:
    contracts: list[ContractRecord] = []
    for row in rows:
        contract = project_award_contract(row)
        if contract is not None:
            contracts.append(contract)
    return contracts


def map_segment(segment: str | None) -> str:
    if not segment:
        return ContractType.OTHER
    lowered = segment.lower()
    if "epci" in lowered:
        return ContractType.EPCI
    if "subsea" in lowered or "sps" in lowered:
        return ContractType.SPS
    if "surf" in lowered:
        return ContractType.SURF
    return ContractType.OTHER


def parse_contract_value(value: str | None) -> int | None:
    """
    Parse free-text values such as "USD 1.2B" or "NOK 500M" into an integer.

    Only digits and dots are kept; a b/m/k anywhere in the text scales the
    number. The currency is not converted.
    """

    if not value:
        return None
    cleaned = _NON_NUMERIC.sub("", value)
    try:
        number = float(cleaned)
    except ValueError:
        return None

    lowered = value.lower()
    for marker, multiplier in _VALUE_MULTIPLIERS:
        if marker in lowered:
            return round(number * multiplier)
    return round(number)


def pdf_external_id(row: ContractAwardRow) -> str:
    fingerprint = f"{row.supplier}{row.operator}{(row.scope or '')[:100]}"
    digest = hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()[:16]
    return f"rystad-pdf-{digest}"


def map_contract_award(row: ContractAwardRow, *, award_date: dt.date) -> ContractRecord:
    description_parts = [row.scope, f"Varighet: {row.duration}" if row.duration else ""]
    return ContractRecord(
        external_id=pdf_external_id(row),
        date=award_date,
        supplier=row.supplier or UNKNOWN,
        operator=row.operator or UNKNOWN,
        project_name=row.region or UNKNOWN,
        description=" | ".join(part for part in description_parts if part),
        contract_type=map_segment(row.segment),
        region=row.region or None,
        country=None,
        source=ContractSource.RYSTAD_AWARDS,
        pipeline_phase=PipelinePhase.AWARDED,
        estimated_value_usd=parse_contract_value(row.value),
    )


def map_contract_awards(
    rows: Iterable[ContractAwardRow],
    *,
    award_date: dt.date | None = None,
) -> list[ContractRecord]:
    when = award_date or dt.date.today()
    return [map_contract_award(row, award_date=when) for row in rows]
