"""ORM models for assessment_db."""

from assessment_db.models.assessment import AssessmentRecord
from assessment_db.models.base import Base
from assessment_db.models.response import ResponseRecord

__all__ = ["Base", "AssessmentRecord", "ResponseRecord"]
