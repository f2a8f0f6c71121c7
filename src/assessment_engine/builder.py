"""Assessment builder — pure transformations over an assessment document.

Every authoring action is an :data:`EditIntent`; :func:`apply` is the single
reducer that maps ``(assessment, intent)`` to a new assessment::

    doc = Assessment.empty("job-1")
    doc = apply(doc, AddQuestion(section_index=0, question_type="multi"))
    doc = apply(doc, AddChoice(section_index=0, question_index=0))
    # choices == ["Option A", "Option B", "Option C"]

The input document is never mutated and ``updatedAt`` is refreshed on every
application.  Out-of-range positions, choice edits on non-choice questions
and cyclic visibility predicates raise :class:`BuilderError`.

Confirmation of destructive intents is not enforced here; that is the job
of :class:`assessment_engine.authoring.BuilderSession`.

Persisting is a separate step: :func:`prepare_for_save` validates and
coerces a document before it is handed to the persistence collaborator.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Iterable

from assessment_engine.coercion import to_number
from assessment_engine.constants import (
    DEFAULT_CHOICES,
    DEFAULT_LONG_MAX_LENGTH,
    DEFAULT_NUMBER_MAX,
    DEFAULT_NUMBER_MIN,
    DEFAULT_SHORT_MAX_LENGTH,
    NO_QUESTIONS_MESSAGE,
    QUESTION_ID_PREFIX,
    SECTION_ID_PREFIX,
)
from assessment_engine.errors import BuilderError, SaveValidationError
from assessment_engine.models.assessment import Assessment, Section, utcnow
from assessment_engine.models.intent import (
    AddChoice,
    AddQuestion,
    AddSection,
    EditIntent,
    RemoveChoice,
    RemoveQuestion,
    RemoveSection,
    RenameSection,
    SetVisibility,
    UpdateChoice,
    UpdateQuestion,
)
from assessment_engine.models.question import Question, QuestionPatch, QuestionType
from assessment_engine.models.session import SaveIssue
from assessment_engine.visibility import find_cycle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def apply(assessment: Assessment, intent: EditIntent, *, now: datetime | None = None) -> Assessment:
    """Apply one edit intent and return the new document."""
    doc = assessment.model_copy(deep=True)

    if isinstance(intent, AddSection):
        _add_section(doc)
    elif isinstance(intent, RemoveSection):
        _section(doc, intent.section_index)
        del doc.sections[intent.section_index]
    elif isinstance(intent, RenameSection):
        _section(doc, intent.section_index).title = intent.title
    elif isinstance(intent, AddQuestion):
        _add_question(doc, intent.section_index, intent.question_type)
    elif isinstance(intent, RemoveQuestion):
        section = _section(doc, intent.section_index)
        _question(section, intent.question_index)
        del section.questions[intent.question_index]
    elif isinstance(intent, UpdateQuestion):
        _update_question(doc, intent.section_index, intent.question_index, intent.changes)
    elif isinstance(intent, SetVisibility):
        q = _question(_section(doc, intent.section_index), intent.question_index)
        q.visible_if = dict(intent.visible_if) if intent.visible_if else None
        _check_acyclic(doc)
    elif isinstance(intent, AddChoice):
        q = _choice_question(doc, intent.section_index, intent.question_index)
        choices = list(q.choices or [])
        choices.append(f"Option {_choice_letter(len(choices))}")
        q.choices = choices
    elif isinstance(intent, UpdateChoice):
        q = _choice_question(doc, intent.section_index, intent.question_index)
        _choice_index(q, intent.choice_index)
        q.choices[intent.choice_index] = intent.value
    elif isinstance(intent, RemoveChoice):
        q = _choice_question(doc, intent.section_index, intent.question_index)
        _choice_index(q, intent.choice_index)
        del q.choices[intent.choice_index]
    else:
        raise BuilderError(f"Unsupported edit intent: {intent!r}")

    doc.updated_at = now or utcnow()
    logger.debug("applied %s to assessment job_id=%s", intent.intent, doc.job_id)
    return doc


# ---------------------------------------------------------------------------
# Convenience wrappers: one per intent
# ---------------------------------------------------------------------------

def add_section(assessment: Assessment, *, now: datetime | None = None) -> Assessment:
    return apply(assessment, AddSection(), now=now)


def remove_section(assessment: Assessment, section_index: int, *, now: datetime | None = None) -> Assessment:
    return apply(assessment, RemoveSection(section_index=section_index), now=now)


def rename_section(
    assessment: Assessment, section_index: int, title: str, *, now: datetime | None = None
) -> Assessment:
    return apply(assessment, RenameSection(section_index=section_index, title=title), now=now)


def add_question(
    assessment: Assessment,
    section_index: int,
    question_type: QuestionType,
    *,
    now: datetime | None = None,
) -> Assessment:
    return apply(
        assessment, AddQuestion(section_index=section_index, question_type=question_type), now=now
    )


def remove_question(
    assessment: Assessment, section_index: int, question_index: int, *, now: datetime | None = None
) -> Assessment:
    return apply(
        assessment,
        RemoveQuestion(section_index=section_index, question_index=question_index),
        now=now,
    )


def update_question(
    assessment: Assessment,
    section_index: int,
    question_index: int,
    changes: QuestionPatch | dict,
    *,
    now: datetime | None = None,
) -> Assessment:
    """Merge ``changes`` into a question; a dict is validated into a :class:`QuestionPatch`."""
    if not isinstance(changes, QuestionPatch):
        changes = QuestionPatch.model_validate(changes)
    return apply(
        assessment,
        UpdateQuestion(section_index=section_index, question_index=question_index, changes=changes),
        now=now,
    )


def set_visibility(
    assessment: Assessment,
    section_index: int,
    question_index: int,
    visible_if: dict[str, str] | None,
    *,
    now: datetime | None = None,
) -> Assessment:
    return apply(
        assessment,
        SetVisibility(
            section_index=section_index, question_index=question_index, visible_if=visible_if
        ),
        now=now,
    )


def add_choice(
    assessment: Assessment, section_index: int, question_index: int, *, now: datetime | None = None
) -> Assessment:
    return apply(
        assessment, AddChoice(section_index=section_index, question_index=question_index), now=now
    )


def update_choice(
    assessment: Assessment,
    section_index: int,
    question_index: int,
    choice_index: int,
    value: str,
    *,
    now: datetime | None = None,
) -> Assessment:
    return apply(
        assessment,
        UpdateChoice(
            section_index=section_index,
            question_index=question_index,
            choice_index=choice_index,
            value=value,
        ),
        now=now,
    )


def remove_choice(
    assessment: Assessment,
    section_index: int,
    question_index: int,
    choice_index: int,
    *,
    now: datetime | None = None,
) -> Assessment:
    return apply(
        assessment,
        RemoveChoice(
            section_index=section_index,
            question_index=question_index,
            choice_index=choice_index,
        ),
        now=now,
    )


# ---------------------------------------------------------------------------
# Save preparation
# ---------------------------------------------------------------------------

# (model attribute, wire name) of the numeric constraint fields
_NUMERIC_FIELDS = (("min", "min"), ("max", "max"), ("max_length", "maxLength"))

# Patch fields that cannot be cleared on a question
_NON_NULLABLE = frozenset({"label", "type", "required"})


def prepare_for_save(assessment: Assessment, *, lenient_constraints: bool = False) -> Assessment:
    """Validate and normalize a document before it is persisted.

    - At least one question across all sections is required.
    - ``min``, ``max`` and ``maxLength`` are coerced to numbers; blank input
      becomes absent.  Non-numeric input is reported as an issue, or, with
      ``lenient_constraints=True``, dropped with a warning (legacy behaviour).
    - Visibility predicates must not form a cycle.

    Returns the normalized copy; raises :class:`SaveValidationError` listing
    every issue found.  The input document is never modified.
    """
    issues: list[SaveIssue] = []
    if assessment.question_count == 0:
        issues.append(SaveIssue(code="no_questions", message=NO_QUESTIONS_MESSAGE))

    doc = assessment.model_copy(deep=True)
    for si, section in enumerate(doc.sections):
        for qi, q in enumerate(section.questions):
            for attr, wire_name in _NUMERIC_FIELDS:
                raw = getattr(q, attr)
                try:
                    setattr(q, attr, to_number(raw))
                except ValueError:
                    path = f"sections[{si}].questions[{qi}].{wire_name}"
                    if lenient_constraints:
                        logger.warning(
                            "dropping non-numeric %s=%r on question %s (job_id=%s)",
                            wire_name, raw, q.id, doc.job_id,
                        )
                        setattr(q, attr, None)
                    else:
                        issues.append(SaveIssue(
                            code="invalid_constraint",
                            message=f"{wire_name} of question '{q.label or q.id}' must be a number",
                            path=path,
                            question_id=q.id,
                        ))

    cycle = find_cycle(doc)
    if cycle:
        issues.append(SaveIssue(
            code="visibility_cycle",
            message=f"Visibility conditions form a cycle: {' -> '.join(cycle)}",
            question_id=cycle[0],
        ))

    if issues:
        logger.info(
            "save rejected for job_id=%s: %s",
            doc.job_id, ", ".join(i.code for i in issues),
        )
        raise SaveValidationError(issues)
    return doc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _section(doc: Assessment, index: int) -> Section:
    if not 0 <= index < len(doc.sections):
        raise BuilderError(f"section index {index} out of range (0..{len(doc.sections) - 1})")
    return doc.sections[index]


def _question(section: Section, index: int) -> Question:
    if not 0 <= index < len(section.questions):
        raise BuilderError(
            f"question index {index} out of range in section '{section.id}' "
            f"(0..{len(section.questions) - 1})"
        )
    return section.questions[index]


def _choice_question(doc: Assessment, section_index: int, question_index: int) -> Question:
    q = _question(_section(doc, section_index), question_index)
    if not q.is_choice:
        raise BuilderError(f"question '{q.id}' of type '{q.type}' has no choices")
    return q


def _choice_index(q: Question, index: int) -> None:
    count = len(q.choices or [])
    if not 0 <= index < count:
        raise BuilderError(f"choice index {index} out of range for question '{q.id}'")


def _next_id(prefix: str, start: int, used: Iterable[str]) -> str:
    """``prefix<n>`` for the first n >= start that is not already used."""
    taken = set(used)
    n = start
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


def _choice_letter(index: int) -> str:
    """Spreadsheet-style letters: 0 → A, 25 → Z, 26 → AA."""
    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def _add_section(doc: Assessment) -> None:
    position = len(doc.sections) + 1
    sid = _next_id(SECTION_ID_PREFIX, position, (s.id for s in doc.sections))
    doc.sections.append(Section(id=sid, title=f"Section {position}"))


def _add_question(doc: Assessment, section_index: int, question_type: QuestionType) -> None:
    section = _section(doc, section_index)
    # Ids are unique across the whole assessment so predicates resolve unambiguously.
    qid = _next_id(QUESTION_ID_PREFIX, len(section.questions) + 1, doc.question_ids)
    q = Question(id=qid, type=question_type, label=f"Question {qid}")
    if question_type in ("single", "multi"):
        q.choices = list(DEFAULT_CHOICES)
    elif question_type == "number":
        q.min = DEFAULT_NUMBER_MIN
        q.max = DEFAULT_NUMBER_MAX
    elif question_type == "short":
        q.max_length = DEFAULT_SHORT_MAX_LENGTH
    elif question_type == "long":
        q.max_length = DEFAULT_LONG_MAX_LENGTH
    section.questions.append(q)


def _update_question(
    doc: Assessment, section_index: int, question_index: int, changes: QuestionPatch
) -> None:
    q = _question(_section(doc, section_index), question_index)
    # Constraints from a previous type are kept when ``type`` changes.
    for name in changes.model_fields_set:
        value = getattr(changes, name)
        if value is None and name in _NON_NULLABLE:
            continue
        setattr(q, name, copy.deepcopy(value))
    if "visible_if" in changes.model_fields_set:
        if not q.visible_if:
            q.visible_if = None
        _check_acyclic(doc)


def _check_acyclic(doc: Assessment) -> None:
    cycle = find_cycle(doc)
    if cycle:
        raise BuilderError(f"visibility conditions form a cycle: {' -> '.join(cycle)}")
