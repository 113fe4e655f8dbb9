"""create source fact tables (xmt_data, surf_data, subsea_unit_data, upcoming_awards)

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:10:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def _project_fact_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("import_batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("development_project", sa.Text(), nullable=True),
        sa.Column("asset", sa.Text(), nullable=True),
        sa.Column("operator", sa.Text(), nullable=True),
        sa.Column("surf_contractor", sa.Text(), nullable=True),
        sa.Column("facility_category", sa.Text(), nullable=True),
        sa.Column("field_type", sa.Text(), nullable=True),
        sa.Column("water_depth_category", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "xmt_data",
        *_project_fact_columns(),
        sa.Column("continent", sa.Text(), nullable=True),
        sa.Column("distance_group", sa.Text(), nullable=True),
        sa.Column("contract_award_year", sa.Integer(), nullable=True),
        sa.Column("contract_type", sa.Text(), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=False, server_default=""),
        sa.Column("state", sa.Text(), nullable=False, server_default=""),
        sa.Column("xmt_count", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["import_batch_id"], ["import_batches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "purpose",
            "state",
            name="uq_xmt_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("ix_xmt_data_year", "xmt_data", ["year"], unique=False)
    op.create_index("ix_xmt_data_development_project", "xmt_data", ["development_project"], unique=False)
    op.create_index("ix_xmt_data_operator", "xmt_data", ["operator"], unique=False)

    op.create_table(
        "surf_data",
        *_project_fact_columns(),
        sa.Column("continent", sa.Text(), nullable=True),
        sa.Column("distance_group", sa.Text(), nullable=True),
        sa.Column("design_category", sa.Text(), nullable=False, server_default=""),
        sa.Column("line_group", sa.Text(), nullable=False, server_default=""),
        sa.Column("km_surf_lines", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(["import_batch_id"], ["import_batches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "design_category",
            "line_group",
            name="uq_surf_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("ix_surf_data_year", "surf_data", ["year"], unique=False)
    op.create_index("ix_surf_data_development_project", "surf_data", ["development_project"], unique=False)

    op.create_table(
        "subsea_unit_data",
        *_project_fact_columns(),
        sa.Column("continent", sa.Text(), nullable=True),
        sa.Column("distance_group", sa.Text(), nullable=True),
        sa.Column("unit_category", sa.Text(), nullable=False, server_default=""),
        sa.Column("unit_count", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["import_batch_id"], ["import_batches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "year",
            "development_project",
            "asset",
            "unit_category",
            name="uq_subsea_unit_data_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("ix_subsea_unit_data_year", "subsea_unit_data", ["year"], unique=False)

    op.create_table(
        "upcoming_awards",
        *_project_fact_columns(),
        sa.Column("field_size_category", sa.Text(), nullable=True),
        sa.Column("xmts_awarded", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["import_batch_id"], ["import_batches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "year",
            "development_project",
            "asset",
            name="uq_upcoming_awards_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("ix_upcoming_awards_year", "upcoming_awards", ["year"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_upcoming_awards_year", table_name="upcoming_awards")
    op.drop_table("upcoming_awards")
    op.drop_index("ix_subsea_unit_data_year", table_name="subsea_unit_data")
    op.drop_table("subsea_unit_data")
    op.drop_index("ix_surf_data_development_project", table_name="surf_data")
    op.drop_index("ix_surf_data_year", table_name="surf_data")
    op.drop_table("surf_data")
    op.drop_index("ix_xmt_data_operator", table_name="xmt_data")
    op.drop_index("ix_xmt_data_development_project", table_name="xmt_data")
    op.drop_index("ix_xmt_data_year", table_name="xmt_data")
    op.drop_table("xmt_data")
