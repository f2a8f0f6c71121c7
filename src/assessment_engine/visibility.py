"""Visibility evaluator — which questions are currently shown.

A question without a ``visibleIf`` predicate is always visible.  Otherwise
the predicate is a conjunction of ``{dependency id: required value}`` pairs;
a pair holds when

  - the dependency's answer is a collection (multi-choice) containing the
    required value, or
  - the dependency's answer equals the required value exactly.

A pair whose dependency question does not exist, or whose answer is still
undefined, does not hold.  Authoring mistakes therefore hide a field rather
than break the form.

The evaluator is a pure function and keeps no cache: callers recompute it
after every answer change.  It reads current answers only, so cyclic
predicates cannot loop here; the builder rejects them separately via
:func:`find_cycle`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from assessment_engine.models.assessment import Assessment
from assessment_engine.models.question import Question

logger = logging.getLogger(__name__)

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def pair_holds(answer: Any, required: str) -> bool:
    """Evaluate one ``(dependency, required value)`` pair against an answer."""
    if answer is None:
        return False
    if isinstance(answer, _COLLECTION_TYPES):
        return required in answer
    return answer == required


def is_visible(
    question: Question,
    answers: Mapping[str, Any],
    known_ids: set[str] | None = None,
) -> bool:
    """Return True if ``question`` is shown for the given answers.

    ``known_ids`` is the set of question ids in the assessment; when given,
    a predicate naming an unknown dependency fails.
    """
    if not question.visible_if:
        return True
    for dep_id, required in question.visible_if.items():
        if known_ids is not None and dep_id not in known_ids:
            logger.warning("question %s depends on unknown question %s", question.id, dep_id)
            return False
        if not pair_holds(answers.get(dep_id), required):
            return False
    return True


def compute_visibility(assessment: Assessment, answers: Mapping[str, Any]) -> dict[str, bool]:
    """Map every question id in ``assessment`` to its current visible flag."""
    known = assessment.question_ids
    visible: dict[str, bool] = {}
    for q in assessment.iter_questions():
        visible[q.id] = is_visible(q, answers, known)
    return visible


# ---------------------------------------------------------------------------
# Dependency graph: used by the builder to reject cyclic predicates
# ---------------------------------------------------------------------------

def dependency_graph(assessment: Assessment) -> dict[str, set[str]]:
    """Return ``{question id: ids it depends on}`` for existing dependencies."""
    known = assessment.question_ids
    graph: dict[str, set[str]] = {qid: set() for qid in known}
    for q in assessment.iter_questions():
        for dep_id in (q.visible_if or {}):
            if dep_id in known:
                graph[q.id].add(dep_id)
    return graph


def find_cycle(assessment: Assessment) -> list[str] | None:
    """Return one dependency cycle as a closed path (``[a, b, a]``), or None.

    A question depending on itself is a cycle of length one.
    """
    graph = dependency_graph(assessment)
    # 0 = unvisited, 1 = on the current path, 2 = done
    state: dict[str, int] = {qid: 0 for qid in graph}
    path: list[str] = []

    def visit(qid: str) -> list[str] | None:
        state[qid] = 1
        path.append(qid)
        for dep in sorted(graph[qid]):
            if state[dep] == 1:
                return path[path.index(dep):] + [dep]
            if state[dep] == 0:
                found = visit(dep)
                if found:
                    return found
        path.pop()
        state[qid] = 2
        return None

    for qid in sorted(graph):
        if state[qid] == 0:
            found = visit(qid)
            if found:
                return found
    return None
