"""Validation evaluator — per-question invalid flags for the current answers.

Rules are only applied to questions that are both touched and visible; an
untouched or hidden question is never reported invalid.  For the others:

  1. required + empty → ``required`` (remaining checks are skipped).
     Empty means an empty selection for multi-choice, and None or "" for
     every other type.
  2. empty + not required → valid.
  3. number: a present value below ``min`` or above ``max`` →
     ``out_of_range`` (bounds are inclusive); a value that is not numeric
     at all → ``not_a_number``.
  4. short / long: a value longer than ``maxLength`` → ``too_long``.
     A missing or zero ``maxLength`` means no limit.

Single-choice, multi-choice and file questions only have the required rule.

Like the visibility evaluator, this is pure and recomputed on every change
and blur; it never retains prior results.
"""

from __future__ import annotations

from typing import Any, Collection, Mapping

from assessment_engine.coercion import bound_or_none, to_number
from assessment_engine.constants import (
    REASON_NOT_A_NUMBER,
    REASON_OUT_OF_RANGE,
    REASON_REQUIRED,
    REASON_TOO_LONG,
)
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.question import Question
from assessment_engine.models.session import ValidationReport
from assessment_engine.visibility import compute_visibility


def is_empty(question: Question, value: Any) -> bool:
    """Emptiness as the required rule sees it."""
    if question.type == "multi":
        return not value
    return value is None or value == ""


def check_question(question: Question, value: Any) -> str | None:
    """Return the reason code ``value`` fails ``question``'s rules, or None.

    Applies the rules unconditionally; touched/visible gating is done by
    :func:`validate_answers`.
    """
    empty = is_empty(question, value)
    if question.required and empty:
        return REASON_REQUIRED
    if empty:
        return None

    if question.type == "number":
        try:
            num = to_number(value)
        except ValueError:
            return REASON_NOT_A_NUMBER
        if num is None:
            return None
        lo = bound_or_none(question.min)
        hi = bound_or_none(question.max)
        if lo is not None and num < lo:
            return REASON_OUT_OF_RANGE
        if hi is not None and num > hi:
            return REASON_OUT_OF_RANGE
        return None

    if question.is_text:
        limit = bound_or_none(question.max_length)
        if limit and len(str(value)) > limit:
            return REASON_TOO_LONG

    return None


def validate_answers(
    assessment: Assessment,
    visibility: Mapping[str, bool],
    answers: Mapping[str, Any],
    touched: Collection[str],
) -> ValidationReport:
    """Evaluate every question and return a :class:`ValidationReport`."""
    invalid: dict[str, bool] = {}
    reasons: dict[str, str] = {}
    for q in assessment.iter_questions():
        reason = None
        if q.id in touched and visibility.get(q.id, False):
            reason = check_question(q, answers.get(q.id))
        # Ids may repeat across sections in legacy documents; any failure wins.
        invalid[q.id] = invalid.get(q.id, False) or reason is not None
        if reason is not None:
            reasons.setdefault(q.id, reason)
    return ValidationReport(invalid=invalid, reasons=reasons)


def validate_submission(assessment: Assessment, answers: Mapping[str, Any]) -> ValidationReport:
    """Validate a complete response as submit does: every visible question is touched.

    Used by the server to re-check a response document against the stored
    assessment before accepting it.
    """
    visibility = compute_visibility(assessment, answers)
    touched = {qid for qid, shown in visibility.items() if shown}
    return validate_answers(assessment, visibility, answers, touched)
