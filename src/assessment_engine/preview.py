"""Rendered view of an assessment for a given answer state.

The builder's live preview, the runtime form and the server's preview
endpoint all render through :func:`build_view`, so an author sees exactly
what a respondent will see: hidden questions are left out and invalid
flags follow the touched set.
"""

from __future__ import annotations

from typing import Any, Collection, Mapping

from assessment_engine.constants import INVALID_FIELD_MESSAGE
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.session import (
    AssessmentView,
    QuestionView,
    SectionView,
    ValidationReport,
)
from assessment_engine.validation import validate_answers
from assessment_engine.visibility import compute_visibility


def build_view(
    assessment: Assessment,
    answers: Mapping[str, Any] | None = None,
    touched: Collection[str] | None = None,
    *,
    visibility: Mapping[str, bool] | None = None,
    report: ValidationReport | None = None,
) -> AssessmentView:
    """Build the :class:`AssessmentView` for the given answers and touched set.

    ``visibility`` and ``report`` may be passed when the caller has already
    computed them for the same inputs.
    """
    answers = answers or {}
    touched = touched or set()
    if visibility is None:
        visibility = compute_visibility(assessment, answers)
    if report is None:
        report = validate_answers(assessment, visibility, answers, touched)

    sections: list[SectionView] = []
    for position, section in enumerate(assessment.sections, start=1):
        questions: list[QuestionView] = []
        for q in section.questions:
            if not visibility.get(q.id, False):
                continue
            invalid = report.invalid.get(q.id, False)
            questions.append(QuestionView(
                id=q.id,
                type=q.type,
                label=q.label,
                required=q.required,
                choices=list(q.choices) if q.choices is not None else None,
                min=q.min,
                max=q.max,
                max_length=q.max_length,
                value=answers.get(q.id),
                invalid=invalid,
                reason=report.reasons.get(q.id),
                message=INVALID_FIELD_MESSAGE if invalid else None,
            ))
        sections.append(SectionView(
            id=section.id, title=section.title, position=position, questions=questions,
        ))

    return AssessmentView(
        job_id=assessment.job_id,
        sections=sections,
        is_empty=not assessment.sections,
        first_invalid=report.first_invalid(assessment),
    )
