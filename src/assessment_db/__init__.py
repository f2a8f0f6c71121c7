"""assessment_db — PostgreSQL persistence layer for assessments.

This package provides the ORM models, async engine factory, repository,
and the :class:`SqlAssessmentStore` adapter that plugs the database into
the engine's collaborator interfaces.  It is consumed by the FastAPI
server.
"""

from assessment_db.engine import dispose_engine, get_engine, get_session_factory, transaction
from assessment_db.models import AssessmentRecord, ResponseRecord
from assessment_db.repository import AssessmentRepository
from assessment_db.store import SqlAssessmentStore

__all__ = [
    "AssessmentRecord",
    "ResponseRecord",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
    "transaction",
    "AssessmentRepository",
    "SqlAssessmentStore",
]
