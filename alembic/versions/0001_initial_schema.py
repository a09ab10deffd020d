"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from alembic import op

from hireflow.db.seed import DEFAULT_STATUSES

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "job_postings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("department", sa.String(120), nullable=False, server_default=""),
        sa.Column("location", sa.String(255), nullable=False, server_default=""),
        sa.Column("job_type", sa.String(80), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("description_detail", sa.Text(), nullable=True),
        sa.Column("ai_analysis_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("scoring_rubric_json", sa.JSON(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    statuses = op.create_table(
        "application_statuses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(80), nullable=False, unique=True),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("color", sa.String(20), nullable=False, server_default="#9e9e9e"),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "candidates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("job_postings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("resume_file_name", sa.String(500), nullable=False, server_default=""),
        sa.Column("resume_file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("resume_content", sa.Text(), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(60), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("extracted_info_json", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("match_percentage", sa.Integer(), nullable=True),
        sa.Column("ai_summary", sa.Text(), nullable=True),
        sa.Column("ai_analysis_summary", sa.Text(), nullable=True),
        sa.Column("strengths_json", sa.JSON(), nullable=False),
        sa.Column("weaknesses_json", sa.JSON(), nullable=False),
        sa.Column("recommendations_json", sa.JSON(), nullable=False),
        sa.Column("processing_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("application_statuses.id"), nullable=True),
        sa.Column("analysis_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("analysis_completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_candidates_job_id", "candidates", ["job_id"])
    op.create_index("ix_candidates_processing_status", "candidates", ["processing_status"])
    op.create_index("ix_candidates_status_id", "candidates", ["status_id"])

    now = datetime.now(UTC)
    op.bulk_insert(
        statuses,
        [
            {
                "name": status["name"],
                "display_name": status["display_name"],
                "description": status["description"],
                "color": status["color"],
                "is_default": True,
                "is_active": True,
                "sort_order": sort_order,
                "created_at": now,
                "updated_at": now,
            }
            for sort_order, status in enumerate(DEFAULT_STATUSES, start=1)
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_candidates_status_id", table_name="candidates")
    op.drop_index("ix_candidates_processing_status", table_name="candidates")
    op.drop_index("ix_candidates_job_id", table_name="candidates")
    op.drop_table("candidates")
    op.drop_table("application_statuses")
    op.drop_table("job_postings")
