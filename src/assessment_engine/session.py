"""RuntimeSession — the respondent-side state machine.

A session holds the answers and touched flags for one respondent filling
in one job's assessment.  Visibility and validation are recomputed
synchronously after every change, so ``session.visibility`` and
``session.report`` always reflect the current answers.

States::

    loading ──► ready ──► submitting ──► submitted
                  ▲            │
                  └── failed ──┘

``submit()`` follows the form protocol:

  1. mark every currently-visible question as touched
  2. re-validate
  3. if anything visible is invalid, stay ``ready`` and report the first
     invalid question in document order as the focus target
  4. otherwise hand a :class:`ResponseDocument` to the submitter; success
     ends the session, a :class:`CollaboratorError` returns to ``ready``
     with answers and touched flags preserved

Transitions are serialized with an ``asyncio.Lock``: a second ``submit()``
waits for the one in flight and then sees the resulting state.

Answers and touched flags live only as long as the session object; the
caller drops the session on successful submit or navigation away.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable

from assessment_engine.constants import SUBMIT_FAILED_MESSAGE
from assessment_engine.errors import (
    AssessmentNotFoundError,
    CollaboratorError,
    InvalidTransitionError,
)
from assessment_engine.interfaces import AssessmentStore, ResponseSubmitter
from assessment_engine.models.assessment import Assessment, utcnow
from assessment_engine.models.session import (
    AssessmentView,
    ResponseDocument,
    SessionState,
    SubmitOutcome,
    ValidationReport,
)
from assessment_engine.preview import build_view
from assessment_engine.validation import validate_answers
from assessment_engine.visibility import compute_visibility

logger = logging.getLogger(__name__)

_COLLECTION_TYPES = (list, tuple, set, frozenset)


class RuntimeSession:
    """Holds one respondent's answers and drives the submit protocol.

    Args:
        job_id: the job whose assessment is being filled in
        submitter: collaborator receiving the response document
        clock: returns the submission timestamp (defaults to UTC now)
    """

    def __init__(
        self,
        job_id: str,
        submitter: ResponseSubmitter,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.job_id = job_id
        self._submitter = submitter
        self._clock = clock or utcnow
        self._lock = asyncio.Lock()

        self.state = SessionState.LOADING
        self.assessment: Assessment | None = None
        self.answers: dict[str, Any] = {}
        self.touched: set[str] = set()
        self.visibility: dict[str, bool] = {}
        self.report = ValidationReport()
        self.focus_qid: str | None = None
        self.last_error: str | None = None

    # ==================================================================
    # Loading
    # ==================================================================

    async def load(self, store: AssessmentStore) -> None:
        """Fetch the assessment from ``store`` and enter ``ready``.

        Raises:
            AssessmentNotFoundError: the job has no assessment to fill in.
        """
        self._require(SessionState.LOADING, "load")
        assessment = await store.load_assessment(self.job_id)
        if assessment is None:
            raise AssessmentNotFoundError(self.job_id)
        self.start(assessment)

    def start(self, assessment: Assessment) -> None:
        """Enter ``ready`` with an already-loaded assessment."""
        self._require(SessionState.LOADING, "start")
        self.assessment = assessment
        self.answers = {}
        self.touched = set()
        self.state = SessionState.READY
        self._recompute()
        logger.info(
            "runtime session ready: job_id=%s questions=%d",
            self.job_id, assessment.question_count,
        )

    # ==================================================================
    # Input events
    # ==================================================================

    def set_answer(self, qid: str, value: Any) -> None:
        """Record an answer (or clear it with None) and re-evaluate.

        Multi-choice answers are stored as a list of unique values in the
        order given.
        """
        self._require(SessionState.READY, "set_answer")
        question = self._known(qid)
        if value is None:
            self.answers.pop(qid, None)
        elif question.type == "multi" and isinstance(value, _COLLECTION_TYPES):
            items = sorted(value) if isinstance(value, (set, frozenset)) else value
            self.answers[qid] = list(dict.fromkeys(items))
        else:
            self.answers[qid] = value
        self._recompute()

    def touch(self, qid: str) -> None:
        """Mark a question as touched (its field lost focus)."""
        self._require(SessionState.READY, "touch")
        self._known(qid)
        self.touched.add(qid)
        self._recompute()

    # ==================================================================
    # Submit
    # ==================================================================

    async def submit(self) -> SubmitOutcome:
        """Validate everything visible and submit if the form is clean."""
        async with self._lock:
            self._require(SessionState.READY, "submit")

            # 1-2: bulk-touch visible questions, re-validate
            self.touched.update(qid for qid, shown in self.visibility.items() if shown)
            self._recompute()

            # 3: block on invalid input, focus the first problem
            if not self.report.is_valid:
                invalid_ids = self.report.invalid_ids(self.assessment)
                self.focus_qid = invalid_ids[0]
                logger.info(
                    "submit blocked: job_id=%s invalid=%s focus=%s",
                    self.job_id, invalid_ids, self.focus_qid,
                )
                return SubmitOutcome(
                    status="invalid", focus_qid=self.focus_qid, invalid_ids=invalid_ids,
                )

            # 4: hand off to the collaborator
            self.focus_qid = None
            response = ResponseDocument(
                values={
                    qid: list(v) if isinstance(v, list) else v
                    for qid, v in self.answers.items()
                },
                submitted_at=self._clock(),
            )
            self.state = SessionState.SUBMITTING
            try:
                await self._submitter.submit_response(self.job_id, response)
            except CollaboratorError as exc:
                self.state = SessionState.READY
                self.last_error = SUBMIT_FAILED_MESSAGE
                logger.warning("submission failed: job_id=%s error=%s", self.job_id, exc)
                return SubmitOutcome(status="failed", error=SUBMIT_FAILED_MESSAGE)
            except BaseException:
                # Bugs and cancellation both leave the form editable again.
                self.state = SessionState.READY
                logger.warning("submission aborted: job_id=%s", self.job_id)
                raise

            self.state = SessionState.SUBMITTED
            self.last_error = None
            logger.info(
                "response submitted: job_id=%s answers=%d", self.job_id, len(response.values),
            )
            return SubmitOutcome(status="submitted", response=response)

    # ==================================================================
    # Read helpers
    # ==================================================================

    def is_invalid(self, qid: str) -> bool:
        return self.report.invalid.get(qid, False)

    def view(self) -> AssessmentView:
        """The form as currently rendered (visible questions + invalid flags)."""
        if self.assessment is None:
            raise InvalidTransitionError("view: assessment not loaded yet")
        return build_view(
            self.assessment,
            self.answers,
            self.touched,
            visibility=self.visibility,
            report=self.report,
        )

    # ==================================================================
    # Internal helpers
    # ==================================================================

    def _recompute(self) -> None:
        self.visibility = compute_visibility(self.assessment, self.answers)
        self.report = validate_answers(self.assessment, self.visibility, self.answers, self.touched)

    def _known(self, qid: str):
        question = self.assessment.find_question(qid)
        if question is None:
            raise KeyError(f"Unknown question id: {qid}")
        return question

    def _require(self, state: SessionState, operation: str) -> None:
        if self.state != state:
            raise InvalidTransitionError(
                f"{operation} is only allowed in state '{state.value}', "
                f"session is '{self.state.value}'"
            )
