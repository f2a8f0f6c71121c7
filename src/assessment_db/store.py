"""SqlAssessmentStore — the engine's collaborator interfaces on PostgreSQL.

Binds one ``AsyncSession`` to the :class:`AssessmentStore` and
:class:`ResponseSubmitter` ABCs.  Writes are flushed, not committed; the
request scope that owns the session commits (see
``assessment_server.dependencies.get_db``).

Database errors are wrapped into :class:`CollaboratorError` so engine
sessions treat them as transient and keep their in-memory state.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_db.repository import AssessmentRepository
from assessment_engine.errors import CollaboratorError
from assessment_engine.interfaces import AssessmentStore, ResponseSubmitter
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.session import ResponseDocument

logger = logging.getLogger(__name__)


class SqlAssessmentStore(AssessmentStore, ResponseSubmitter):
    """Assessment persistence and response intake backed by one DB session."""

    def __init__(self, db: AsyncSession, repo: AssessmentRepository | None = None) -> None:
        self._db = db
        self._repo = repo or AssessmentRepository()

    async def load_assessment(self, job_id: str) -> Assessment | None:
        try:
            record = await self._repo.get(self._db, job_id)
        except SQLAlchemyError as exc:
            logger.error("failed to load assessment job_id=%s: %s", job_id, exc)
            raise CollaboratorError(f"Failed to load assessment for job_id={job_id}") from exc
        if record is None:
            return None
        return Assessment.from_document(record.document)

    async def save_assessment(self, job_id: str, assessment: Assessment) -> None:
        try:
            await self._repo.upsert(self._db, job_id, assessment.to_document())
        except SQLAlchemyError as exc:
            logger.error("failed to save assessment job_id=%s: %s", job_id, exc)
            raise CollaboratorError(f"Failed to save assessment for job_id={job_id}") from exc

    async def submit_response(self, job_id: str, response: ResponseDocument) -> None:
        document = response.to_document()
        try:
            await self._repo.add_response(
                self._db,
                job_id=job_id,
                values=document["values"],
                submitted_at=response.submitted_at,
            )
        except SQLAlchemyError as exc:
            logger.error("failed to store response job_id=%s: %s", job_id, exc)
            raise CollaboratorError(f"Failed to store response for job_id={job_id}") from exc

    async def count_assessments(self) -> int:
        return await self._repo.count(self._db)

    async def list_responses(
        self, job_id: str, *, limit: int = 20, offset: int = 0
    ) -> list[ResponseDocument]:
        """Submitted responses for a job, most recent first."""
        try:
            records = await self._repo.list_responses(
                self._db, job_id, limit=limit, offset=offset,
            )
        except SQLAlchemyError as exc:
            logger.error("failed to list responses job_id=%s: %s", job_id, exc)
            raise CollaboratorError(f"Failed to list responses for job_id={job_id}") from exc
        return [
            ResponseDocument(values=r.values, submitted_at=r.submitted_at) for r in records
        ]
