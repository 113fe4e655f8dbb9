"""
db/models/contract.py

Contract rows: awarded contracts extracted from PDFs and forecast awards
projected from the upcoming-awards sheet. Both are keyed by external_id.
"""

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import BigInteger, Date, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ContractType:
    EPCI = "EPCI"
    SUBSEA = "Subsea"
    SURF = "SURF"
    SPS = "SPS"
    OTHER = "Other"


class ContractSource:
    RYSTAD_AWARDS = "rystad_awards"
    RYSTAD_FORECAST = "rystad_forecast"


class PipelinePhase:
    FEED = "feed"
    AWARDED = "awarded"


class Contract(Base, TimestampMixin):
    __tablename__ = "contracts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
        comment="Deterministic id derived from the source row",
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    supplier: Mapped[str] = mapped_column(Text, nullable=False)
    operator: Mapped[str] = mapped_column(Text, nullable=False)
    project_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    contract_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    country: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_value_usd: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    source: Mapped[str | None] = mapped_column(String(32), nullable=True)
    pipeline_phase: Mapped[str | None] = mapped_column(String(32), nullable=True)

    __table_args__ = (Index("ix_contracts_source", "source"),)
