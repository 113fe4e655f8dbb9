"""Structured output contracts for document extraction."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


class ContractAwardRow(BaseModel):
    """One row of a contract-award table.

    The model is asked for strings but sometimes answers with numbers or
    nulls; every field is coerced to a trimmed string.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    supplier: str = ""
    operator: str = ""
    value: str = ""
    scope: str = ""
    region: str = ""
    segment: str = ""
    duration: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class MarketReportExtraction(BaseModel):
    """Raw market report object as returned by the model.

    Forecast entries are kept untyped here; they are normalized downstream
    where malformed entries are dropped one by one.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    report_period: Optional[str] = None
    report_title: Optional[str] = None
    summary: Optional[str] = None
    highlights: List[str] = Field(default_factory=list)
    key_figures: Dict[str, Any] = Field(default_factory=dict)
    forecasts: List[Any] = Field(default_factory=list)

    @field_validator("report_period", "report_title", "summary", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("highlights", mode="before")
    @classmethod
    def _string_items(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("key_figures", mode="before")
    @classmethod
    def _mapping_or_empty(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @field_validator("forecasts", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    @classmethod
    def empty(cls) -> "MarketReportExtraction":
        return cls()
