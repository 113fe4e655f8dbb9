"""create projects, contracts, forecasts and documents tables

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 09:20:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("development_project", sa.Text(), nullable=False),
        sa.Column("asset", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("continent", sa.Text(), nullable=True),
        sa.Column("operator", sa.Text(), nullable=True),
        sa.Column("surf_contractor", sa.Text(), nullable=True),
        sa.Column("facility_category", sa.Text(), nullable=True),
        sa.Column("field_type", sa.Text(), nullable=True),
        sa.Column("water_depth_category", sa.Text(), nullable=True),
        sa.Column("field_size_category", sa.Text(), nullable=True),
        sa.Column("xmt_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("surf_km", sa.Float(), nullable=False, server_default="0"),
        sa.Column("subsea_unit_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_year", sa.Integer(), nullable=True),
        sa.Column("last_year", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "development_project",
            "asset",
            "country",
            name="uq_projects_natural_key",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index("ix_projects_country", "projects", ["country"], unique=False)
    op.create_index("ix_projects_operator", "projects", ["operator"], unique=False)

    op.create_table(
        "contracts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "external_id",
            sa.Text(),
            nullable=False,
            comment="Deterministic id derived from the source row",
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("supplier", sa.Text(), nullable=False),
        sa.Column("operator", sa.Text(), nullable=False),
        sa.Column("project_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("contract_type", sa.String(length=16), nullable=True),
        sa.Column("region", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("estimated_value_usd", sa.BigInteger(), nullable=True),
        sa.Column("source", sa.String(length=32), nullable=True),
        sa.Column("pipeline_phase", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_contracts_source", "contracts", ["source"], unique=False)

    op.create_table(
        "forecasts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("metric", sa.String(length=128), nullable=False),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("unit", sa.String(length=32), nullable=True),
        sa.Column("source", sa.String(length=32), nullable=False, server_default="rystad_report"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "metric", name="uq_forecasts_year_metric"),
    )

    op.create_table(
        "documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(length=100), nullable=True),
        sa.Column("file_size_bytes", sa.BigInteger(), nullable=True),
        sa.Column("ai_summary", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_file_name", "documents", ["file_name"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_documents_file_name", table_name="documents")
    op.drop_table("documents")
    op.drop_table("forecasts")
    op.drop_index("ix_contracts_source", table_name="contracts")
    op.drop_table("contracts")
    op.drop_index("ix_projects_operator", table_name="projects")
    op.drop_index("ix_projects_country", table_name="projects")
    op.drop_table("projects")
