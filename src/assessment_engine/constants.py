"""Assessment constants shared across the engine.

These values are referenced by the builder, the evaluators and the
sessions.  They mirror the defaults the authoring UI has always used so
that freshly-authored questions look the same as persisted ones.

Default constraint values can be overridden via environment variables so
that deployments can change them without code changes.
"""

import os

# Closed set of question type tags.  These strings are the wire contract
# for persisted documents and must never be renamed.
QUESTION_TYPES: tuple[str, ...] = ("single", "multi", "short", "long", "number", "file")

# Human-readable labels for each type (used by the preview and CLI output).
QUESTION_TYPE_LABELS: dict[str, str] = {
    "single": "Single choice",
    "multi": "Multi choice",
    "short": "Short text",
    "long": "Long text",
    "number": "Numeric",
    "file": "File",
}

CHOICE_TYPES: frozenset[str] = frozenset({"single", "multi"})
TEXT_TYPES: frozenset[str] = frozenset({"short", "long"})

# Type-default constraints applied by the "add question" builder operation.
DEFAULT_CHOICES: tuple[str, ...] = ("Option A", "Option B")
DEFAULT_NUMBER_MIN = int(os.getenv("ASSESSMENT_DEFAULT_NUMBER_MIN", "0"))
DEFAULT_NUMBER_MAX = int(os.getenv("ASSESSMENT_DEFAULT_NUMBER_MAX", "100"))
DEFAULT_SHORT_MAX_LENGTH = int(os.getenv("ASSESSMENT_DEFAULT_SHORT_MAX_LENGTH", "120"))
DEFAULT_LONG_MAX_LENGTH = int(os.getenv("ASSESSMENT_DEFAULT_LONG_MAX_LENGTH", "500"))

# Id prefixes for auto-generated identifiers: s1, s2, ... / q1, q2, ...
SECTION_ID_PREFIX = "s"
QUESTION_ID_PREFIX = "q"

# Validation reason codes reported per question.
REASON_REQUIRED = "required"
REASON_OUT_OF_RANGE = "out_of_range"
REASON_NOT_A_NUMBER = "not_a_number"
REASON_TOO_LONG = "too_long"

# User-facing messages.
CONFIRM_REMOVE_SECTION = "Are you sure you want to remove this section?"
CONFIRM_REMOVE_QUESTION = "Remove this question?"
NO_QUESTIONS_MESSAGE = "Add at least one question before saving."
INVALID_FIELD_MESSAGE = "This field is required or invalid."
SUBMIT_FAILED_MESSAGE = "An error occurred during submission."
