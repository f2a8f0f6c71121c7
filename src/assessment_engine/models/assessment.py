"""Assessment and section models — the persisted questionnaire document.

An assessment belongs to exactly one job (``jobId``) and holds an ordered
list of sections, each with an ordered list of questions.  The document
tree round-trips to the wire format through :meth:`Assessment.to_document`
and :meth:`Assessment.from_document`::

    {
      "jobId": "...",
      "sections": [
        {"id": "s1", "title": "Section 1", "questions": [{"id": "q1", ...}]}
      ],
      "updatedAt": "2025-01-01T00:00:00Z"
    }

Invariants enforced at construction:
  - section ids are unique within the assessment
  - question ids are unique within their section

Question ids may repeat across sections in documents authored before the
builder generated assessment-wide ids; those documents still load.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterator, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from assessment_engine.models.question import Question


def utcnow() -> datetime:
    """Timezone-aware current time; the default clock for documents and sessions."""
    return datetime.now(timezone.utc)


class Section(BaseModel):
    """An ordered group of questions."""

    id: str
    title: str = ""
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_question_ids(self):
        seen: set[str] = set()
        for q in self.questions:
            if q.id in seen:
                raise ValueError(f"duplicate question id '{q.id}' in section '{self.id}'")
            seen.add(q.id)
        return self


class Assessment(BaseModel):
    """The full questionnaire document for one job."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")
    sections: List[Section] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @model_validator(mode="after")
    def _unique_section_ids(self):
        seen: set[str] = set()
        for s in self.sections:
            if s.id in seen:
                raise ValueError(f"duplicate section id '{s.id}'")
            seen.add(s.id)
        return self

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, job_id: str, *, now: datetime | None = None) -> Assessment:
        """A new, never-authored assessment: one default section, no questions."""
        return cls(
            job_id=job_id,
            sections=[Section(id="s1", title="Section 1")],
            updated_at=now or utcnow(),
        )

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Assessment:
        """Parse a wire-format document (camelCase keys)."""
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the wire format, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def iter_questions(self) -> Iterator[Question]:
        """Yield every question in document order (section order, then question order)."""
        for section in self.sections:
            yield from section.questions

    def find_question(self, qid: str) -> Question | None:
        """First question with the given id in document order, or None."""
        for q in self.iter_questions():
            if q.id == qid:
                return q
        return None

    @property
    def question_ids(self) -> set[str]:
        return {q.id for q in self.iter_questions()}

    @property
    def question_count(self) -> int:
        return sum(len(s.questions) for s in self.sections)
