"""BuilderSession — the author-side working copy of one job's assessment.

Wraps the pure reducer in :mod:`assessment_engine.builder` with the
interactive concerns of the editor:

  - loading the persisted document (or starting from the empty document
    when the job has none yet)
  - gating destructive intents (removing a section or a question) behind
    an explicit confirmation
  - saving through the persistence collaborator, keeping the working copy
    untouched when the save fails so the author can retry
  - a live preview rendered with the same evaluators as the runtime form

Usage::

    builder = BuilderSession("job-1")
    await builder.load(store)
    builder.dispatch(AddQuestion(section_index=0, question_type="number"))

    pending = builder.dispatch(RemoveSection(section_index=0))
    if isinstance(pending, ConfirmationRequired):
        builder.dispatch(pending.intent, confirmed=True)

    await builder.save(store)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Collection, Mapping

from assessment_engine.builder import apply, prepare_for_save
from assessment_engine.constants import CONFIRM_REMOVE_QUESTION, CONFIRM_REMOVE_SECTION
from assessment_engine.errors import InvalidTransitionError
from assessment_engine.interfaces import AssessmentStore
from assessment_engine.models.assessment import Assessment, utcnow
from assessment_engine.models.intent import DESTRUCTIVE_INTENTS, EditIntent, RemoveSection
from assessment_engine.models.session import AssessmentView, ConfirmationRequired
from assessment_engine.preview import build_view

logger = logging.getLogger(__name__)


class BuilderSession:
    """Editable working copy of an assessment plus its save workflow.

    Args:
        job_id: the job whose assessment is being authored
        clock: timestamp source for ``updatedAt`` (defaults to UTC now)
        lenient_constraints: drop non-numeric constraints at save time
            instead of rejecting the save
    """

    def __init__(
        self,
        job_id: str,
        *,
        clock: Callable[[], datetime] | None = None,
        lenient_constraints: bool = False,
    ) -> None:
        self.job_id = job_id
        self._clock = clock or utcnow
        self.lenient_constraints = lenient_constraints
        self._lock = asyncio.Lock()
        self.assessment: Assessment | None = None
        self.dirty = False

    # --- loading ---

    async def load(self, store: AssessmentStore) -> Assessment:
        """Load the persisted document, or start from the empty one."""
        doc = await store.load_assessment(self.job_id)
        if doc is None:
            logger.info("no assessment for job_id=%s, starting empty", self.job_id)
            doc = Assessment.empty(self.job_id, now=self._clock())
        self.open(doc)
        return doc

    def open(self, assessment: Assessment) -> None:
        """Use an already-loaded document as the working copy."""
        self.assessment = assessment
        self.dirty = False

    # --- editing ---

    def dispatch(
        self, intent: EditIntent, *, confirmed: bool = False
    ) -> Assessment | ConfirmationRequired:
        """Apply an edit intent to the working copy.

        Removing a section or a question is only applied with
        ``confirmed=True``; otherwise the working copy is left unchanged
        and a :class:`ConfirmationRequired` carrying the prompt is returned.

        Raises:
            BuilderError: the intent does not fit the current document.
        """
        doc = self._require_loaded("dispatch")
        if isinstance(intent, DESTRUCTIVE_INTENTS) and not confirmed:
            message = (
                CONFIRM_REMOVE_SECTION if isinstance(intent, RemoveSection)
                else CONFIRM_REMOVE_QUESTION
            )
            return ConfirmationRequired(intent=intent, message=message)

        self.assessment = apply(doc, intent, now=self._clock())
        self.dirty = True
        return self.assessment

    # --- saving ---

    async def save(self, store: AssessmentStore) -> Assessment:
        """Validate, normalize and persist the working copy.

        The working copy is replaced by the normalized document only after
        the store accepted it.

        Raises:
            SaveValidationError: the document is not savable; the store is
                not called.
            CollaboratorError: the store failed; the working copy is intact.
        """
        async with self._lock:
            doc = self._require_loaded("save")
            prepared = prepare_for_save(doc, lenient_constraints=self.lenient_constraints)
            await store.save_assessment(self.job_id, prepared)
            # Edits dispatched while the store call was in flight stay in the working copy.
            if self.assessment is doc:
                self.assessment = prepared
                self.dirty = False
            logger.info(
                "assessment saved: job_id=%s sections=%d questions=%d",
                self.job_id, len(prepared.sections), prepared.question_count,
            )
            return prepared

    # --- preview ---

    def preview(
        self,
        answers: Mapping[str, Any] | None = None,
        touched: Collection[str] | None = None,
    ) -> AssessmentView:
        """Render the working copy as a respondent would see it."""
        return build_view(self._require_loaded("preview"), answers, touched)

    def _require_loaded(self, operation: str) -> Assessment:
        if self.assessment is None:
            raise InvalidTransitionError(f"{operation}: no assessment loaded for job_id={self.job_id}")
        return self.assessment
