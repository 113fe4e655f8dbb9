"""
db/models/source_facts.py

Source-fact tables, one row per spreadsheet line of the four market sheets.

Every table carries a natural conflict key (year + project + asset + a
shape-specific discriminator). The unique constraints treat NULL as equal on
PostgreSQL so that re-importing a row with no asset or year updates the
existing row instead of adding a second one.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Float, ForeignKey, Index, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from db.base import Base, CreatedAtMixin


class ProjectFactColumns(CreatedAtMixin):
    """
    Descriptive columns shared by all four source-fact tables.
    """

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    @declared_attr
    def import_batch_id(cls) -> Mapped[uuid.UUID | None]:
        return mapped_column(Uuid, ForeignKey("import_batches.id"), nullable=True)

    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    country: Mapped[str | None] = mapped_column(Text, nullable=True)
    development_project: Mapped[str | None] = mapped_column(Text, nullable=True)
    asset: Mapped[str | None] = mapped_column(Text, nullable=True)
    operator: Mapped[str | None] = mapped_column(Text, nullable=True)
    surf_contractor: Mapped[str | None] = mapped_column(Text, nullable=True)
    facility_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    water_depth_category: Mapped[str | None] = mapped_column(Text, nullable=True)


class XmtRecord(Base, ProjectFactColumns):
    """Subsea tree (XMT) installation counts."""

    __tablename__ = "xmt_data"

    continent: Mapped[str | None] = mapped_column(Text, nullable=True)
    distance_group: Mapped[str | None] = mapped_column(Text, nullable=True)
    contract_award_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contract_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    purpose: Mapped[str] = mapped_column(Text, nullable=False, default="")
    state: Mapped[str] = mapped_column(Text, nullable=False, default="")
    xmt_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    __table_args__ = (
        UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "purpose",
            "state",
            name="uq_xmt_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_xmt_data_year", "year"),
        Index("ix_xmt_data_development_project", "development_project"),
        Index("ix_xmt_data_operator", "operator"),
    )


class SurfLineRecord(Base, ProjectFactColumns):
    """SURF line lengths in kilometres."""

    __tablename__ = "surf_data"

    continent: Mapped[str | None] = mapped_column(Text, nullable=True)
    distance_group: Mapped[str | None] = mapped_column(Text, nullable=True)
    design_category: Mapped[str] = mapped_column(Text, nullable=False, default="")
    line_group: Mapped[str] = mapped_column(Text, nullable=False, default="")
    km_surf_lines: Mapped[float | None] = mapped_column(Float, nullable=True, default=0)

    __table_args__ = (
        UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "design_category",
            "line_group",
            name="uq_surf_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_surf_data_year", "year"),
        Index("ix_surf_data_development_project", "development_project"),
    )


class SubseaUnitRecord(Base, ProjectFactColumns):
    """Subsea unit counts per unit category."""

    __tablename__ = "subsea_unit_data"

    continent: Mapped[str | None] = mapped_column(Text, nullable=True)
    distance_group: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit_category: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unit_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    __table_args__ = (
        UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "unit_category",
            name="uq_subsea_unit_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_subsea_unit_data_year", "year"),
    )


class UpcomingAwardRecord(Base, ProjectFactColumns):
    """Forecast-style upcoming XMT awards."""

    __tablename__ = "upcoming_awards"

    field_size_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    xmts_awarded: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)

    __table_args__ = (
        UniqueConstraint(
            "year",
            "development_project",
            "asset",
            name="uq_upcoming_awards_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_upcoming_awards_year", "year"),
    )
