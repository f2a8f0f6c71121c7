"""Edit intent models for the assessment builder.

Each authoring action is an explicit intent value.  The builder reducer
(:func:`assessment_engine.builder.apply`) turns ``(assessment, intent)``
into a new assessment; intents carry no behaviour of their own.

The discriminated ``EditIntent`` union uses the ``intent`` field as its
discriminator so JSON payloads deserialize straight into the right type::

    {"intent": "add_question", "section_index": 0, "question_type": "multi"}

Positions are zero-based indices into the current document.
"""

from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field

from assessment_engine.models.question import QuestionPatch, QuestionType


# --- Sections ---

class AddSection(BaseModel):
    """Append a section with an auto-generated title."""

    intent: Literal["add_section"] = "add_section"


class RemoveSection(BaseModel):
    """Remove the section at ``section_index`` (destructive)."""

    intent: Literal["remove_section"] = "remove_section"
    section_index: int


class RenameSection(BaseModel):
    """Replace a section's title; an empty string is allowed."""

    intent: Literal["rename_section"] = "rename_section"
    section_index: int
    title: str


# --- Questions ---

class AddQuestion(BaseModel):
    """Append a question of ``question_type`` with type-default constraints."""

    intent: Literal["add_question"] = "add_question"
    section_index: int
    question_type: QuestionType


class RemoveQuestion(BaseModel):
    """Remove a question from a section (destructive)."""

    intent: Literal["remove_question"] = "remove_question"
    section_index: int
    question_index: int


class UpdateQuestion(BaseModel):
    """Merge the explicitly-set fields of ``changes`` into a question."""

    intent: Literal["update_question"] = "update_question"
    section_index: int
    question_index: int
    changes: QuestionPatch


class SetVisibility(BaseModel):
    """Replace a question's visibility predicate; None or {} clears it."""

    intent: Literal["set_visibility"] = "set_visibility"
    section_index: int
    question_index: int
    visible_if: Optional[Dict[str, str]] = None


# --- Choices ---

class AddChoice(BaseModel):
    """Append a placeholder choice (``Option C`` after two choices)."""

    intent: Literal["add_choice"] = "add_choice"
    section_index: int
    question_index: int


class UpdateChoice(BaseModel):
    """Replace the choice at ``choice_index``."""

    intent: Literal["update_choice"] = "update_choice"
    section_index: int
    question_index: int
    choice_index: int
    value: str


class RemoveChoice(BaseModel):
    """Delete the choice at ``choice_index``; predicates elsewhere are untouched."""

    intent: Literal["remove_choice"] = "remove_choice"
    section_index: int
    question_index: int
    choice_index: int


EditIntent = Annotated[
    Union[
        AddSection,
        RemoveSection,
        RenameSection,
        AddQuestion,
        RemoveQuestion,
        UpdateQuestion,
        SetVisibility,
        AddChoice,
        UpdateChoice,
        RemoveChoice,
    ],
    Field(discriminator="intent"),
]

# Intents the authoring UI must confirm before they are applied.
DESTRUCTIVE_INTENTS = (RemoveSection, RemoveQuestion)
