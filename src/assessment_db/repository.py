"""Async CRUD repository for assessment documents and responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  Methods flush but never commit.

The repository stores documents as given; validation belongs in the engine
(``assessment_engine.builder.prepare_for_save``).
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_db.models.assessment import AssessmentRecord
from assessment_db.models.response import ResponseRecord


class AssessmentRepository:
    """Async read/write operations on ``assessments`` and ``assessment_responses``."""

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------

    async def get(self, db: AsyncSession, job_id: str) -> AssessmentRecord | None:
        """Fetch the assessment row for a job."""
        return await db.get(AssessmentRecord, job_id)

    async def upsert(
        self, db: AsyncSession, job_id: str, document: dict[str, Any]
    ) -> AssessmentRecord:
        """Insert or fully replace the document for a job.

        The caller must ``await db.commit()`` to persist.
        """
        record = await db.get(AssessmentRecord, job_id)
        if record is None:
            record = AssessmentRecord(job_id=job_id, document=document)
            db.add(record)
        else:
            record.document = document
            record.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return record

    async def count(self, db: AsyncSession) -> int:
        """Number of stored assessments."""
        result = await db.execute(select(func.count()).select_from(AssessmentRecord))
        return int(result.scalar_one())

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def add_response(
        self,
        db: AsyncSession,
        *,
        job_id: str,
        values: dict[str, Any],
        submitted_at: datetime,
    ) -> ResponseRecord:
        """Append a submitted response.  The caller commits."""
        record = ResponseRecord(job_id=job_id, values=values, submitted_at=submitted_at)
        db.add(record)
        await db.flush()  # Populate id / received_at
        return record

    async def list_responses(
        self,
        db: AsyncSession,
        job_id: str,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ResponseRecord]:
        """List responses for a job, most recent submission first."""
        stmt = (
            select(ResponseRecord)
            .where(ResponseRecord.job_id == job_id)
            .order_by(ResponseRecord.submitted_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
