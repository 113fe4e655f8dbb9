"""
app/domain/contract.py

Contract rows derived from forecast awards and extracted award documents.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass
from typing import Any

CONTRACT_CONFLICT_KEY: tuple[str, ...] = ("external_id",)


@dataclass(frozen=True)
class ContractRecord:
    """
    Contract prepared for persistence, keyed by a deterministic external id.
    """

    external_id: str
    date: dt.date
    supplier: str
    operator: str
    project_name: str
    description: str | None
    contract_type: str
    region: str | None
    country: str | None
    source: str
    pipeline_phase: str
    estimated_value_usd: int | None = None

    def to_record(self) -> dict[str, Any]:
        return asdict(self)
