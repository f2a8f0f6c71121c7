"""Session, report and view models — the contract between the engine and callers.

These models describe what the engine hands back while an assessment is
being authored or filled in:

  - ValidationReport: per-question invalid flags for the current answers
  - SubmitOutcome: result of a runtime ``submit()`` attempt
  - ConfirmationRequired: a destructive builder intent awaiting confirmation
  - SaveIssue: one save-time validation problem
  - ResponseDocument: the submission payload handed to the collaborator
  - AssessmentView: what the preview and the runtime form render

The ``ResponseDocument`` serializes to the wire shape
``{"values": {...}, "submittedAt": "..."}``.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from assessment_engine.models.assessment import Assessment, utcnow
from assessment_engine.models.intent import EditIntent
from assessment_engine.models.question import Constraint, QuestionType


class SessionState(str, enum.Enum):
    """Lifecycle states for a runtime (respondent) session.

    Transitions:
        loading -> ready          (assessment loaded, answers empty)
        ready -> submitting       (all visible questions valid)
        submitting -> submitted   (collaborator acknowledged)
        submitting -> ready       (collaborator failed; answers kept)
    """

    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class ResponseDocument(BaseModel):
    """Finalized answers for one assessment, created once at successful submit."""

    model_config = ConfigDict(populate_by_name=True)

    values: dict[str, Any] = Field(default_factory=dict)
    submitted_at: datetime = Field(default_factory=utcnow, alias="submittedAt")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ValidationReport(BaseModel):
    """Per-question validity for one evaluation pass.

    ``invalid`` has an entry for every question id in the assessment.
    ``reasons`` only lists the invalid ones, with a reason code
    (``required``, ``out_of_range``, ``not_a_number``, ``too_long``).
    """

    invalid: dict[str, bool] = Field(default_factory=dict)
    reasons: dict[str, str] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(self.invalid.values())

    def invalid_ids(self, assessment: Assessment) -> list[str]:
        """Invalid question ids in document order (section, then question)."""
        out: list[str] = []
        for q in assessment.iter_questions():
            if self.invalid.get(q.id) and q.id not in out:
                out.append(q.id)
        return out

    def first_invalid(self, assessment: Assessment) -> str | None:
        """The first invalid question in document order, or None."""
        ids = self.invalid_ids(assessment)
        return ids[0] if ids else None


class SubmitOutcome(BaseModel):
    """Result of :meth:`RuntimeSession.submit`.

    - ``invalid``: validation blocked submission; ``focus_qid`` is the
      question to scroll to / focus.
    - ``submitted``: the collaborator acknowledged ``response``.
    - ``failed``: the collaborator failed; ``error`` is user-facing and the
      session is back in ``ready`` with answers intact.
    """

    status: Literal["invalid", "submitted", "failed"]
    focus_qid: Optional[str] = None
    invalid_ids: list[str] = Field(default_factory=list)
    response: Optional[ResponseDocument] = None
    error: Optional[str] = None


class ConfirmationRequired(BaseModel):
    """A destructive edit that was not applied because it needs confirmation.

    Re-dispatch the same ``intent`` with ``confirmed=True`` to apply it.
    """

    type: Literal["confirmation_required"] = "confirmation_required"
    intent: EditIntent
    message: str


class SaveIssue(BaseModel):
    """One save-time validation problem."""

    code: str
    message: str
    path: Optional[str] = None
    question_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Rendered view: shared by the builder preview and the runtime form
# ---------------------------------------------------------------------------

class QuestionView(BaseModel):
    """A currently-visible question with its answer and validity."""

    id: str
    type: QuestionType
    label: str
    required: bool
    choices: Optional[list[str]] = None
    min: Optional[Constraint] = None
    max: Optional[Constraint] = None
    max_length: Optional[Constraint] = None
    value: Any = None
    invalid: bool = False
    reason: Optional[str] = None
    message: Optional[str] = None


class SectionView(BaseModel):
    id: str
    title: str
    position: int
    questions: list[QuestionView] = Field(default_factory=list)


class AssessmentView(BaseModel):
    """What a respondent sees for the current answers and touched set."""

    job_id: str
    sections: list[SectionView] = Field(default_factory=list)
    is_empty: bool = False
    first_invalid: Optional[str] = None
