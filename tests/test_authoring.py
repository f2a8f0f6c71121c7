"""Tests for BuilderSession — confirmation gating, save workflow and preview."""

import asyncio

import pytest

from assessment_engine.authoring import BuilderSession
from assessment_engine.errors import (
    BuilderError,
    CollaboratorError,
    InvalidTransitionError,
    SaveValidationError,
)
from assessment_engine.models import (
    AddQuestion,
    AddSection,
    ConfirmationRequired,
    QuestionPatch,
    RemoveQuestion,
    RemoveSection,
    UpdateQuestion,
)

from helpers.factories import FIXED_NOW, fixed_clock, gated_pair
from helpers.stores import InMemoryStore


# =====================================================================
# Loading
# =====================================================================

class TestLoad:

    @pytest.mark.asyncio
    async def test_new_job_starts_from_empty_document(self, memory_store):
        b = BuilderSession("job-9", clock=fixed_clock)
        doc = await b.load(memory_store)
        assert doc.job_id == "job-9"
        assert [s.title for s in doc.sections] == ["Section 1"]
        assert doc.updated_at == FIXED_NOW
        assert b.dirty is False

    @pytest.mark.asyncio
    async def test_existing_document_is_loaded(self):
        store = InMemoryStore({"job-1": gated_pair()})
        b = BuilderSession("job-1")
        doc = await b.load(store)
        assert [q.id for q in doc.iter_questions()] == ["q1", "q2"]

    def test_dispatch_before_load(self):
        with pytest.raises(InvalidTransitionError):
            BuilderSession("job-1").dispatch(AddSection())


# =====================================================================
# Dispatch and confirmation
# =====================================================================

class TestDispatch:

    @pytest.mark.asyncio
    async def test_plain_intent_is_applied(self, memory_store):
        b = BuilderSession("job-1", clock=fixed_clock)
        await b.load(memory_store)
        doc = b.dispatch(AddQuestion(section_index=0, question_type="number"))
        assert b.assessment is doc
        assert doc.sections[0].questions[0].max == 100
        assert b.dirty is True

    @pytest.mark.asyncio
    async def test_remove_section_needs_confirmation(self, memory_store):
        b = BuilderSession("job-1")
        await b.load(memory_store)
        before = b.assessment

        pending = b.dispatch(RemoveSection(section_index=0))
        assert isinstance(pending, ConfirmationRequired)
        assert pending.message == "Are you sure you want to remove this section?"
        assert b.assessment is before

        doc = b.dispatch(pending.intent, confirmed=True)
        assert doc.sections == []

    @pytest.mark.asyncio
    async def test_remove_question_needs_confirmation(self):
        b = BuilderSession("job-1")
        b.open(gated_pair())
        pending = b.dispatch(RemoveQuestion(section_index=0, question_index=1))
        assert pending.message == "Remove this question?"
        assert len(b.assessment.sections[0].questions) == 2

        b.dispatch(pending.intent, confirmed=True)
        assert [q.id for q in b.assessment.iter_questions()] == ["q1"]

    @pytest.mark.asyncio
    async def test_builder_error_leaves_working_copy(self):
        b = BuilderSession("job-1")
        b.open(gated_pair())
        before = b.assessment
        with pytest.raises(BuilderError):
            b.dispatch(UpdateQuestion(
                section_index=0, question_index=0,
                changes=QuestionPatch(visible_if={"q2": "x"}),
            ))
        assert b.assessment is before


# =====================================================================
# Save
# =====================================================================

class TestSave:

    @pytest.mark.asyncio
    async def test_empty_assessment_never_reaches_store(self, memory_store):
        b = BuilderSession("job-1")
        await b.load(memory_store)
        b.dispatch(AddSection())

        with pytest.raises(SaveValidationError) as exc_info:
            await b.save(memory_store)
        assert exc_info.value.issues[0].code == "no_questions"
        assert memory_store.save_calls == 0

    @pytest.mark.asyncio
    async def test_successful_save_replaces_working_copy(self, memory_store):
        b = BuilderSession("job-1")
        await b.load(memory_store)
        b.dispatch(AddQuestion(section_index=0, question_type="number"))
        b.dispatch(UpdateQuestion(
            section_index=0, question_index=0, changes=QuestionPatch(min="5"),
        ))

        saved = await b.save(memory_store)
        assert saved.sections[0].questions[0].min == 5
        assert b.assessment is saved
        assert b.dirty is False
        assert memory_store.documents["job-1"].sections[0].questions[0].min == 5

    @pytest.mark.asyncio
    async def test_failed_save_keeps_working_copy(self, memory_store):
        memory_store.fail_saves = True
        b = BuilderSession("job-1")
        await b.load(memory_store)
        b.dispatch(AddQuestion(section_index=0, question_type="short"))
        before = b.assessment

        with pytest.raises(CollaboratorError):
            await b.save(memory_store)
        assert b.assessment is before
        assert b.dirty is True

        memory_store.fail_saves = False
        await b.save(memory_store)
        assert "job-1" in memory_store.documents

    @pytest.mark.asyncio
    async def test_lenient_constraints(self, memory_store):
        b = BuilderSession("job-1", lenient_constraints=True)
        await b.load(memory_store)
        b.dispatch(AddQuestion(section_index=0, question_type="short"))
        b.dispatch(UpdateQuestion(
            section_index=0, question_index=0, changes=QuestionPatch(max_length="lots"),
        ))
        saved = await b.save(memory_store)
        assert saved.sections[0].questions[0].max_length is None

    @pytest.mark.asyncio
    async def test_edits_during_save_are_kept(self, memory_store):
        gate = asyncio.Event()
        original_save = memory_store.save_assessment

        async def slow_save(job_id, assessment):
            await gate.wait()
            await original_save(job_id, assessment)

        memory_store.save_assessment = slow_save
        b = BuilderSession("job-1")
        await b.load(memory_store)
        b.dispatch(AddQuestion(section_index=0, question_type="short"))

        task = asyncio.create_task(b.save(memory_store))
        await asyncio.sleep(0)
        b.dispatch(AddQuestion(section_index=0, question_type="long"))
        gate.set()
        await task

        assert b.assessment.question_count == 2
        assert b.dirty is True
        assert memory_store.documents["job-1"].question_count == 1


# =====================================================================
# Preview
# =====================================================================

class TestPreview:

    def test_preview_matches_runtime_rules(self):
        b = BuilderSession("job-1")
        b.open(gated_pair())
        view = b.preview({"q1": "Yes"}, {"q2"})
        questions = view.sections[0].questions
        assert [q.id for q in questions] == ["q1", "q2"]
        assert questions[1].invalid is True
        assert questions[1].message == "This field is required or invalid."

        hidden = b.preview({"q1": "No"})
        assert [q.id for q in hidden.sections[0].questions] == ["q1"]
