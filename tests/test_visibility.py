"""Tests for the visibility evaluator and the dependency-cycle finder."""

import logging

import pytest

from assessment_engine.visibility import (
    compute_visibility,
    dependency_graph,
    find_cycle,
    is_visible,
    pair_holds,
)

from helpers.factories import assessment, question


# =====================================================================
# Predicate evaluation
# =====================================================================

class TestPredicates:

    @pytest.mark.parametrize("answers", [{}, {"q1": "Yes"}, {"q1": ["a", "b"]}, {"zz": 3}])
    def test_no_predicate_is_always_visible(self, answers):
        assert is_visible(question("q2"), answers) is True

    def test_empty_predicate_is_always_visible(self):
        assert is_visible(question("q2", visible_if={}), {}) is True

    @pytest.mark.parametrize(
        "answer, expected",
        [
            ("X", True),
            ("Y", False),
            ("x", False),
            (None, False),
            (["A", "X"], True),
            (["A"], False),
            ([], False),
            ({"X"}, True),
        ],
    )
    def test_equality_or_membership(self, answer, expected):
        answers = {} if answer is None else {"q1": answer}
        q = question("q2", visible_if={"q1": "X"})
        assert is_visible(q, answers) is expected

    def test_all_pairs_must_hold(self):
        q = question("q3", visible_if={"q1": "Yes", "q2": "Remote"})
        assert is_visible(q, {"q1": "Yes", "q2": "Remote"})
        assert not is_visible(q, {"q1": "Yes", "q2": "Onsite"})
        assert not is_visible(q, {"q1": "Yes"})

    def test_numeric_answer_does_not_match_string(self):
        assert pair_holds(5, "5") is False

    def test_unknown_dependency_hides_question(self):
        doc = assessment([question("q1", visible_if={"q9": "x"})])
        assert compute_visibility(doc, {"q9": "x"}) == {"q1": False}

    def test_unknown_dependency_is_logged_as_warning(self, caplog):
        doc = assessment([question("q1", visible_if={"q9": "x"})])
        with caplog.at_level(logging.WARNING, logger="assessment_engine.visibility"):
            compute_visibility(doc, {})
        assert "question q1 depends on unknown question q9" in caplog.text


# =====================================================================
# compute_visibility
# =====================================================================

class TestComputeVisibility:

    def test_covers_every_question(self):
        doc = assessment(
            [question("q1", "single", choices=["Yes", "No"])],
            [question("q2", visible_if={"q1": "Yes"}), question("q3")],
        )
        assert compute_visibility(doc, {"q1": "No"}) == {"q1": True, "q2": False, "q3": True}
        assert compute_visibility(doc, {"q1": "Yes"}) == {"q1": True, "q2": True, "q3": True}

    def test_is_idempotent(self):
        doc = assessment([question("q1"), question("q2", visible_if={"q1": "a"})])
        answers = {"q1": "a"}
        assert compute_visibility(doc, answers) == compute_visibility(doc, answers)
        assert answers == {"q1": "a"}

    def test_hidden_dependency_answer_still_counts(self):
        """Only current answers are read, not the dependency's own visibility."""
        doc = assessment([
            question("q1"),
            question("q2", visible_if={"q1": "a"}),
            question("q3", visible_if={"q2": "b"}),
        ])
        vis = compute_visibility(doc, {"q1": "z", "q2": "b"})
        assert vis == {"q1": True, "q2": False, "q3": True}


# =====================================================================
# Cycles
# =====================================================================

class TestCycles:

    def test_graph_ignores_unknown_dependencies(self):
        doc = assessment([question("q1", visible_if={"q9": "x"}), question("q2", visible_if={"q1": "y"})])
        assert dependency_graph(doc) == {"q1": set(), "q2": {"q1"}}

    def test_acyclic_chain(self):
        doc = assessment([
            question("q1"),
            question("q2", visible_if={"q1": "a"}),
            question("q3", visible_if={"q2": "b", "q1": "c"}),
        ])
        assert find_cycle(doc) is None

    def test_two_node_cycle(self):
        doc = assessment([question("q1", visible_if={"q2": "a"}), question("q2", visible_if={"q1": "b"})])
        assert find_cycle(doc) == ["q1", "q2", "q1"]

    def test_self_loop(self):
        doc = assessment([question("q1", visible_if={"q1": "a"})])
        assert find_cycle(doc) == ["q1", "q1"]

    def test_cycle_across_sections(self):
        doc = assessment(
            [question("q1", visible_if={"q3": "a"})],
            [question("q2", visible_if={"q1": "a"}), question("q3", visible_if={"q2": "a"})],
        )
        cycle = find_cycle(doc)
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"q1", "q2", "q3"}
