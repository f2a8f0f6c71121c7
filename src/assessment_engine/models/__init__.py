"""Public model re-exports for assessment_engine.

Consumers should import from ``assessment_engine.models`` rather than
reaching into sub-modules directly.
"""

# --- Document ---
from assessment_engine.models.assessment import Assessment, Section, utcnow
from assessment_engine.models.question import (
    Constraint,
    Question,
    QuestionPatch,
    QuestionType,
)

# --- Builder intents ---
from assessment_engine.models.intent import (
    DESTRUCTIVE_INTENTS,
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

# --- Session / report / view ---
from assessment_engine.models.session import (
    AssessmentView,
    ConfirmationRequired,
    QuestionView,
    ResponseDocument,
    SaveIssue,
    SectionView,
    SessionState,
    SubmitOutcome,
    ValidationReport,
)

__all__ = [
    # Document
    "Assessment",
    "Constraint",
    "Question",
    "QuestionPatch",
    "QuestionType",
    "Section",
    "utcnow",
    # Intents
    "AddChoice",
    "AddQuestion",
    "AddSection",
    "DESTRUCTIVE_INTENTS",
    "EditIntent",
    "RemoveChoice",
    "RemoveQuestion",
    "RemoveSection",
    "RenameSection",
    "SetVisibility",
    "UpdateChoice",
    "UpdateQuestion",
    # Session
    "AssessmentView",
    "ConfirmationRequired",
    "QuestionView",
    "ResponseDocument",
    "SaveIssue",
    "SectionView",
    "SessionState",
    "SubmitOutcome",
    "ValidationReport",
]
