"""ResponseRecord ORM model — one row per submitted response.

Responses are append-only: a respondent's submission is stored as the
answer map it was submitted with and never updated afterwards.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from assessment_db.models.base import Base


class ResponseRecord(Base):
    """A submitted answer map for one job's assessment."""

    __tablename__ = "assessment_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    job_id: Mapped[str] = mapped_column(Text, nullable=False)

    # qid -> answer value (string, number, or list of strings for multi)
    values: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # Client-side submission time (``submittedAt`` on the wire)
    submitted_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    # Server-side receipt time
    received_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_responses_job_submitted", "job_id", "submitted_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ResponseRecord(id={self.id!s}, job_id={self.job_id!r}, "
            f"answers={len(self.values or {})})>"
        )
