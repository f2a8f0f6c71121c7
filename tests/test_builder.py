"""Tests for the builder reducer and save preparation.

Each intent is applied to a small document and the result compared with
what the authoring UI expects: type defaults on new questions, generated
ids, choice placeholders, non-mutation of the input, and cycle rejection.
"""

import pytest
from pydantic import ValidationError

from assessment_engine import builder
from assessment_engine.errors import BuilderError, SaveValidationError
from assessment_engine.models import (
    AddChoice,
    AddQuestion,
    AddSection,
    Assessment,
    QuestionPatch,
    RemoveChoice,
    RenameSection,
    UpdateQuestion,
)

from helpers.factories import FIXED_NOW, assessment, question


@pytest.fixture
def empty():
    return Assessment.empty("job-1", now=FIXED_NOW)


# =====================================================================
# Sections
# =====================================================================

class TestSections:

    def test_add_section_appends_default(self, empty):
        doc = builder.add_section(empty)
        assert [(s.id, s.title) for s in doc.sections] == [
            ("s1", "Section 1"),
            ("s2", "Section 2"),
        ]
        assert doc.sections[1].questions == []

    def test_add_section_skips_ids_in_use(self):
        doc = assessment([], [])
        doc = builder.remove_section(doc, 0)  # leaves s2 only
        doc = builder.add_section(doc)
        assert [s.id for s in doc.sections] == ["s2", "s3"]

    def test_remove_section_drops_its_questions(self):
        doc = assessment([question("q1")], [question("q2")])
        doc = builder.remove_section(doc, 0)
        assert [q.id for q in doc.iter_questions()] == ["q2"]

    def test_rename_section(self, empty):
        doc = builder.apply(empty, RenameSection(section_index=0, title="Experience"))
        assert doc.sections[0].title == "Experience"

    def test_bad_section_index(self, empty):
        with pytest.raises(BuilderError, match="section index 3 out of range"):
            builder.remove_section(empty, 3)


# =====================================================================
# Questions
# =====================================================================

class TestAddQuestion:

    @pytest.mark.parametrize(
        "qtype, expected",
        [
            ("single", {"choices": ["Option A", "Option B"]}),
            ("multi", {"choices": ["Option A", "Option B"]}),
            ("number", {"min": 0, "max": 100}),
            ("short", {"maxLength": 120}),
            ("long", {"maxLength": 500}),
            ("file", {}),
        ],
    )
    def test_type_defaults(self, empty, qtype, expected):
        doc = builder.add_question(empty, 0, qtype)
        q = doc.to_document()["sections"][0]["questions"][0]
        assert q == {
            "id": "q1",
            "type": qtype,
            "label": "Question q1",
            "required": False,
            **expected,
        }

    def test_ids_are_unique_across_sections(self, empty):
        doc = builder.add_question(empty, 0, "short")
        doc = builder.add_section(doc)
        doc = builder.add_question(doc, 1, "short")
        assert [q.id for q in doc.iter_questions()] == ["q1", "q2"]

    def test_id_after_removal_does_not_collide(self, empty):
        doc = empty
        for _ in range(3):
            doc = builder.add_question(doc, 0, "short")
        doc = builder.remove_question(doc, 0, 0)  # q2, q3 remain
        doc = builder.add_question(doc, 0, "short")
        assert [q.id for q in doc.iter_questions()] == ["q2", "q3", "q4"]

    def test_input_document_is_not_mutated(self, empty):
        before = empty.to_document()
        builder.add_question(empty, 0, "multi")
        assert empty.to_document() == before

    def test_updated_at_is_refreshed(self, empty):
        doc = builder.apply(empty, AddSection())
        assert doc.updated_at > FIXED_NOW


class TestUpdateQuestion:

    def test_merges_only_given_fields(self):
        doc = assessment([question("q1", "short", max_length=120)])
        doc = builder.update_question(doc, 0, 0, {"label": "Your name", "required": True})
        q = doc.sections[0].questions[0]
        assert (q.label, q.required, q.max_length) == ("Your name", True, 120)

    def test_explicit_none_clears_constraint(self):
        doc = assessment([question("q1", "short", max_length=120)])
        doc = builder.update_question(doc, 0, 0, {"maxLength": None})
        assert doc.sections[0].questions[0].max_length is None

    def test_misspelled_field_is_rejected(self):
        doc = assessment([question("q1", "short", max_length=120)])
        with pytest.raises(ValidationError, match="maxlength"):
            builder.update_question(doc, 0, 0, {"maxlength": 5})
        assert doc.sections[0].questions[0].max_length == 120

    def test_none_does_not_clear_label_or_type(self):
        doc = assessment([question("q1", "short", label="Name")])
        doc = builder.apply(doc, UpdateQuestion(
            section_index=0, question_index=0, changes=QuestionPatch(label=None, type=None),
        ))
        q = doc.sections[0].questions[0]
        assert (q.label, q.type) == ("Name", "short")

    def test_type_change_keeps_previous_constraints(self):
        doc = assessment([question("q1", "number", min=0, max=100)])
        doc = builder.update_question(doc, 0, 0, {"type": "short"})
        q = doc.sections[0].questions[0]
        assert q.type == "short"
        assert (q.min, q.max) == (0, 100)

    def test_raw_constraint_text_is_kept_until_save(self):
        doc = assessment([question("q1", "number")])
        doc = builder.update_question(doc, 0, 0, {"min": "5"})
        assert doc.sections[0].questions[0].min == "5"


# =====================================================================
# Visibility predicates
# =====================================================================

class TestSetVisibility:

    def test_set_and_clear_predicate(self):
        doc = assessment([question("q1", "single", choices=["Yes", "No"]), question("q2")])
        doc = builder.set_visibility(doc, 0, 1, {"q1": "Yes"})
        assert doc.sections[0].questions[1].visible_if == {"q1": "Yes"}
        doc = builder.set_visibility(doc, 0, 1, {})
        assert doc.sections[0].questions[1].visible_if is None

    def test_cycle_is_rejected(self):
        doc = assessment([question("q1", visible_if={"q2": "a"}), question("q2")])
        with pytest.raises(BuilderError, match="cycle"):
            builder.set_visibility(doc, 0, 1, {"q1": "b"})

    def test_self_reference_is_rejected(self):
        doc = assessment([question("q1")])
        with pytest.raises(BuilderError, match="cycle"):
            builder.update_question(doc, 0, 0, {"visibleIf": {"q1": "x"}})

    def test_dangling_reference_is_allowed(self):
        doc = assessment([question("q1")])
        doc = builder.set_visibility(doc, 0, 0, {"q9": "x"})
        assert doc.sections[0].questions[0].visible_if == {"q9": "x"}


# =====================================================================
# Choices
# =====================================================================

class TestChoices:

    def test_add_then_remove_choice(self):
        """Adding to ["A","B"] appends "Option C"; removing 0 leaves ["B","Option C"]."""
        doc = assessment([
            question("q1", "multi", choices=["A", "B"]),
            question("q2", visible_if={"q1": "B"}),
        ])
        doc = builder.apply(doc, AddChoice(section_index=0, question_index=0))
        assert doc.sections[0].questions[0].choices == ["A", "B", "Option C"]

        doc = builder.apply(doc, RemoveChoice(section_index=0, question_index=0, choice_index=0))
        assert doc.sections[0].questions[0].choices == ["B", "Option C"]
        # Predicates refer to choice values, not positions
        assert doc.sections[0].questions[1].visible_if == {"q1": "B"}

    def test_update_choice(self):
        doc = assessment([question("q1", "single", choices=["Option A", "Option B"])])
        doc = builder.update_choice(doc, 0, 0, 1, "Remote")
        assert doc.sections[0].questions[0].choices == ["Option A", "Remote"]

    def test_placeholder_letters_continue_past_z(self):
        doc = assessment([question("q1", "multi", choices=[str(i) for i in range(26)])])
        doc = builder.add_choice(doc, 0, 0)
        assert doc.sections[0].questions[0].choices[-1] == "Option AA"

    def test_choice_intent_on_text_question(self):
        doc = assessment([question("q1", "short")])
        with pytest.raises(BuilderError, match="has no choices"):
            builder.add_choice(doc, 0, 0)

    def test_bad_choice_index(self):
        doc = assessment([question("q1", "single", choices=["A"])])
        with pytest.raises(BuilderError, match="choice index 4"):
            builder.remove_choice(doc, 0, 0, 4)

    def test_intent_from_json_payload(self, empty):
        from pydantic import TypeAdapter

        from assessment_engine.models import EditIntent

        intent = TypeAdapter(EditIntent).validate_python(
            {"intent": "add_question", "section_index": 0, "question_type": "multi"}
        )
        assert isinstance(intent, AddQuestion)
        doc = builder.apply(empty, intent)
        assert doc.sections[0].questions[0].type == "multi"


# =====================================================================
# Save preparation
# =====================================================================

class TestPrepareForSave:

    def test_no_questions_is_refused(self, empty):
        with pytest.raises(SaveValidationError) as exc_info:
            builder.prepare_for_save(builder.add_section(empty))
        assert [i.code for i in exc_info.value.issues] == ["no_questions"]
        assert str(exc_info.value) == "Add at least one question before saving."

    def test_constraints_are_coerced(self):
        doc = assessment([
            question("q1", "number", min="5", max=" 10 "),
            question("q2", "short", max_length=""),
            question("q3", "long", max_length=250.0),
        ])
        out = builder.prepare_for_save(doc)
        q1, q2, q3 = out.sections[0].questions
        assert (q1.min, q1.max) == (5, 10)
        assert q2.max_length is None
        assert q3.max_length == 250 and isinstance(q3.max_length, int)
        # the input keeps its raw values
        assert doc.sections[0].questions[0].min == "5"

    def test_non_numeric_constraint_is_an_issue(self):
        doc = assessment([question("q1", "number", label="Age", min="abc")])
        with pytest.raises(SaveValidationError) as exc_info:
            builder.prepare_for_save(doc)
        issue = exc_info.value.issues[0]
        assert issue.code == "invalid_constraint"
        assert issue.path == "sections[0].questions[0].min"
        assert issue.question_id == "q1"

    def test_lenient_mode_drops_non_numeric_constraint(self):
        doc = assessment([question("q1", "number", min="abc", max="7")])
        out = builder.prepare_for_save(doc, lenient_constraints=True)
        assert out.sections[0].questions[0].min is None
        assert out.sections[0].questions[0].max == 7

    def test_cycle_in_loaded_document_is_an_issue(self):
        doc = assessment([
            question("q1", visible_if={"q2": "a"}),
            question("q2", visible_if={"q1": "b"}),
        ])
        with pytest.raises(SaveValidationError) as exc_info:
            builder.prepare_for_save(doc)
        assert [i.code for i in exc_info.value.issues] == ["visibility_cycle"]

    def test_issues_are_collected(self):
        doc = assessment([
            question("q1", "number", min="x", max="y"),
        ])
        with pytest.raises(SaveValidationError) as exc_info:
            builder.prepare_for_save(doc)
        assert [i.path for i in exc_info.value.issues] == [
            "sections[0].questions[0].min",
            "sections[0].questions[0].max",
        ]
