"""
db/models/project.py

Aggregated project entity folded from the four source-fact tables.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Float, Index, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Project(Base, TimestampMixin):
    """
    One row per (development_project, asset, country).

    Descriptive columns come from the first source row seen for the key;
    xmt_count, surf_km and subsea_unit_count are additive counters and
    first_year/last_year bound every year observed for the key.
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    development_project: Mapped[str] = mapped_column(Text, nullable=False)
    asset: Mapped[str | None] = mapped_column(Text, nullable=True)
    country: Mapped[str | None] = mapped_column(Text, nullable=True)
    continent: Mapped[str | None] = mapped_column(Text, nullable=True)
    operator: Mapped[str | None] = mapped_column(Text, nullable=True)
    surf_contractor: Mapped[str | None] = mapped_column(Text, nullable=True)
    facility_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    water_depth_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_size_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    xmt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    surf_km: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    subsea_unit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "development_project",
            "asset",
            "country",
            name="uq_projects_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_projects_country", "country"),
        Index("ix_projects_operator", "operator"),
    )
