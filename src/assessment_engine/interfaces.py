"""Abstract collaborator interfaces consumed by the engine.

The engine performs no I/O of its own.  Loading and saving assessment
documents and submitting responses go through these ABCs; the
``assessment_db`` package ships a PostgreSQL implementation
(:class:`assessment_db.store.SqlAssessmentStore`).

Typical integration flow::

    store: AssessmentStore = SqlAssessmentStore(db)

    # Authoring
    builder = BuilderSession("job-1")
    await builder.load(store)
    builder.dispatch(AddQuestion(section_index=0, question_type="short"))
    await builder.save(store)

    # Filling in
    session = RuntimeSession("job-1", submitter=store)
    await session.load(store)
    session.set_answer("q1", "Yes")
    outcome = await session.submit()

Implementations raise :class:`CollaboratorError` for transient failures so
callers can offer a retry.  Any retry policy lives with the caller.
"""

from abc import ABC, abstractmethod

from assessment_engine.models.assessment import Assessment
from assessment_engine.models.session import ResponseDocument


class AssessmentStore(ABC):
    """Persistence of assessment documents, keyed by job id."""

    @abstractmethod
    async def load_assessment(self, job_id: str) -> Assessment | None:
        """Fetch the persisted document for a job.

        Returns None when the job has no assessment yet; that is an
        expected outcome (a new, never-authored assessment), not an error.
        """
        ...

    @abstractmethod
    async def save_assessment(self, job_id: str, assessment: Assessment) -> None:
        """Persist a full document, replacing any previous version.

        Raises
        ------
        CollaboratorError
            On a transient failure.  The caller's in-memory copy must stay
            intact so the author can retry.
        """
        ...


class ResponseSubmitter(ABC):
    """Receiver of finalized response documents."""

    @abstractmethod
    async def submit_response(self, job_id: str, response: ResponseDocument) -> None:
        """Submit a filled-out response for a job's assessment.

        Raises
        ------
        CollaboratorError
            On a transient failure; the session returns to ``ready`` with
            its answers preserved.
        """
        ...
