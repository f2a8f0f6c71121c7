"""Question models for assessment documents.

A question is one field definition of the questionnaire.  Its ``type`` tag
picks the input component and the validation rule class:

    - single: pick one of ``choices``
    - multi: pick any subset of ``choices``
    - short / long: free text, optional ``maxLength``
    - number: numeric input, optional inclusive ``min`` / ``max``
    - file: file name placeholder, presence only

All type-specific constraint fields live on the same model.  Changing a
question's type in the builder keeps constraints left over from the
previous type, so the model cannot be a discriminated union.

Field names serialize to the camelCase wire names used by persisted
documents (``maxLength``, ``visibleIf``).
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from assessment_engine.constants import CHOICE_TYPES, TEXT_TYPES

QuestionType = Literal["single", "multi", "short", "long", "number", "file"]

# Constraint inputs are numbers once saved, but a working copy may still
# hold the raw text the author typed.  Coercion happens at save time.
Constraint = Union[int, float, str]


class Question(BaseModel):
    """One question definition."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: QuestionType
    label: str = ""
    required: bool = False
    choices: Optional[List[str]] = None
    min: Optional[Constraint] = None
    max: Optional[Constraint] = None
    max_length: Optional[Constraint] = Field(default=None, alias="maxLength")
    # {dependency question id: required value}; empty or None means always visible
    visible_if: Optional[Dict[str, str]] = Field(default=None, alias="visibleIf")

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    @property
    def is_text(self) -> bool:
        return self.type in TEXT_TYPES

    @property
    def has_predicate(self) -> bool:
        return bool(self.visible_if)


class QuestionPatch(BaseModel):
    """Partial set of question changes for the ``update_question`` intent.

    Only fields the caller explicitly set are merged, so ``None`` can be
    used to clear a constraint (e.g. ``QuestionPatch(max_length=None)``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    label: Optional[str] = None
    type: Optional[QuestionType] = None
    required: Optional[bool] = None
    choices: Optional[List[str]] = None
    min: Optional[Constraint] = None
    max: Optional[Constraint] = None
    max_length: Optional[Constraint] = Field(default=None, alias="maxLength")
    visible_if: Optional[Dict[str, str]] = Field(default=None, alias="visibleIf")
