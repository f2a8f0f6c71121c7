"""AssessmentRecord ORM model — one row per job's assessment document.

The whole document tree (sections, questions, predicates) lives in a
single JSONB column.  The builder always replaces the full document, so
there is nothing to gain from normalizing questions into their own table.
"""

from datetime import datetime, timezone

from sqlalchemy import Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from assessment_db.models.base import Base


class AssessmentRecord(Base):
    """Persisted assessment, keyed by the external job id."""

    __tablename__ = "assessments"

    job_id: Mapped[str] = mapped_column(Text, primary_key=True)

    # Wire-format document: {"jobId": ..., "sections": [...], "updatedAt": ...}
    document: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<AssessmentRecord(job_id={self.job_id!r}, updated_at={self.updated_at!s})>"
