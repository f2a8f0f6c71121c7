"""Exception hierarchy for the assessment engine.

Structural problems (bad indices, dependency cycles) are programming errors
and derive from ``ValueError``.  User validation problems at runtime are
never raised; they are reported through ``ValidationReport``.  At save time
they are raised as :class:`SaveValidationError` so that nothing reaches the
persistence collaborator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assessment_engine.models.session import SaveIssue


class AssessmentError(Exception):
    """Base class for all engine errors."""


class BuilderError(AssessmentError, ValueError):
    """An edit intent cannot be applied to the given document."""


class SaveValidationError(AssessmentError, ValueError):
    """The document failed save-time validation.

    ``issues`` carries one entry per problem; the message of the first issue
    is used as the exception message so it can be shown to the author as is.
    """

    def __init__(self, issues: list[SaveIssue]) -> None:
        self.issues = list(issues)
        message = self.issues[0].message if self.issues else "Assessment is invalid"
        super().__init__(message)


class InvalidTransitionError(AssessmentError, RuntimeError):
    """A session operation was called in a state that does not allow it."""


class AssessmentNotFoundError(AssessmentError, LookupError):
    """No assessment document exists for the requested job."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Assessment not found: job_id={job_id}")


class CollaboratorError(AssessmentError):
    """A persistence or submission collaborator failed transiently.

    Callers may retry; the engine never discards in-memory state on this
    error.
    """
