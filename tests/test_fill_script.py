"""Tests for scripts/fill_assessment.py running against in-memory submitters."""

import random

import pytest
from rich.console import Console

from fill_assessment import AnswerGenerator, RecordingSubmitter, fill_once

from helpers.factories import assessment, gated_pair, question


def _quiet_console() -> Console:
    return Console(quiet=True)


@pytest.mark.asyncio
async def test_all_optional_assessment_submits_once():
    doc = assessment([question("q1", "short"), question("q2", "number", min=0, max=5)])
    submitter = RecordingSubmitter()

    result = await fill_once(
        doc, submitter, AnswerGenerator(random.Random(7)), _quiet_console(), 1, 0,
    )

    assert result.status == "submitted"
    assert result.blocked_focus is None
    assert result.errors == []
    # only the real run reaches the submitter, not the empty-form check
    assert len(submitter.responses) == 1
    assert submitter.responses[0][0] == "job-1"


@pytest.mark.asyncio
async def test_required_question_blocks_empty_submit():
    submitter = RecordingSubmitter()

    result = await fill_once(
        gated_pair(), submitter, AnswerGenerator(random.Random(3)), _quiet_console(), 1, 1,
    )

    assert result.blocked_focus == "q1"
    assert result.status == "submitted"
    assert len(submitter.responses) == 1
    values = submitter.responses[0][1].values
    assert values["q1"] in ("Yes", "No")
    assert ("q2" in values) == (values["q1"] == "Yes")
