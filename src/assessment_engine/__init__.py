"""assessment_engine — hiring assessment authoring and runtime SDK.

Public API:
    Assessment        — the persisted questionnaire document for one job
    Section           — ordered group of questions
    Question          — one question with its type-specific constraints
    apply             — builder reducer: (assessment, intent) → assessment
    prepare_for_save  — save-time validation and constraint coercion
    BuilderSession    — author-side working copy with confirmation and save
    RuntimeSession    — respondent-side state machine with the submit protocol
    build_view        — rendered view shared by preview and runtime form
    SeedStore         — loads sample assessments from YAML

Evaluators:
    compute_visibility — qid → visible for the current answers
    validate_answers   — per-question invalid flags for answers + touched set
    find_cycle         — first dependency cycle among visibility predicates

Collaborator interfaces:
    AssessmentStore    — ABC for loading / saving documents
    ResponseSubmitter  — ABC for receiving submitted responses
"""

from assessment_engine.authoring import BuilderSession
from assessment_engine.builder import apply, prepare_for_save
from assessment_engine.errors import (
    AssessmentError,
    AssessmentNotFoundError,
    BuilderError,
    CollaboratorError,
    InvalidTransitionError,
    SaveValidationError,
)
from assessment_engine.interfaces import AssessmentStore, ResponseSubmitter
from assessment_engine.models import (
    Assessment,
    AssessmentView,
    ConfirmationRequired,
    EditIntent,
    Question,
    QuestionPatch,
    ResponseDocument,
    SaveIssue,
    Section,
    SessionState,
    SubmitOutcome,
    ValidationReport,
)
from assessment_engine.preview import build_view
from assessment_engine.seeds import SeedStore
from assessment_engine.session import RuntimeSession
from assessment_engine.validation import validate_answers, validate_submission
from assessment_engine.visibility import compute_visibility, find_cycle

__all__ = [
    # Document model
    "Assessment",
    "Section",
    "Question",
    "QuestionPatch",
    "EditIntent",
    # Builder
    "apply",
    "prepare_for_save",
    "BuilderSession",
    "ConfirmationRequired",
    "SaveIssue",
    # Runtime
    "RuntimeSession",
    "SessionState",
    "SubmitOutcome",
    "ResponseDocument",
    "ValidationReport",
    "AssessmentView",
    "build_view",
    # Evaluators
    "compute_visibility",
    "validate_answers",
    "validate_submission",
    "find_cycle",
    # Collaborators
    "AssessmentStore",
    "ResponseSubmitter",
    "SeedStore",
    # Errors
    "AssessmentError",
    "AssessmentNotFoundError",
    "BuilderError",
    "CollaboratorError",
    "InvalidTransitionError",
    "SaveValidationError",
]
