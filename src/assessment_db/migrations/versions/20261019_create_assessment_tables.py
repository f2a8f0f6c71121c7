"""Create assessments and assessment_responses tables.

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- One document per job ---
    op.create_table(
        "assessments",
        sa.Column("job_id", sa.Text, primary_key=True),
        sa.Column(
            "document",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    # --- Append-only submitted responses ---
    op.create_table(
        "assessment_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("job_id", sa.Text, nullable=False),
        sa.Column(
            "values",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("submitted_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "received_at",
            TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index(
        "ix_responses_job_submitted",
        "assessment_responses",
        ["job_id", "submitted_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_responses_job_submitted", table_name="assessment_responses")
    op.drop_table("assessment_responses")
    op.drop_table("assessments")
