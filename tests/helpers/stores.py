"""In-memory collaborators for engine and server tests.

``InMemoryStore`` implements both collaborator ABCs over plain dicts and
can be told to fail so the transient-error paths can be exercised.
"""

from __future__ import annotations

import asyncio

from assessment_engine.errors import CollaboratorError
from assessment_engine.interfaces import AssessmentStore, ResponseSubmitter
from assessment_engine.models.assessment import Assessment
from assessment_engine.models.session import ResponseDocument


class InMemoryStore(AssessmentStore, ResponseSubmitter):
    """Dict-backed store that records every call."""

    def __init__(self, documents: dict[str, Assessment] | None = None) -> None:
        self.documents: dict[str, Assessment] = dict(documents or {})
        self.responses: list[tuple[str, ResponseDocument]] = []
        self.save_calls = 0
        self.submit_calls = 0
        # Set to True to make the next calls raise CollaboratorError
        self.fail_saves = False
        self.fail_submits = False
        # When set, submit_response waits on it before completing
        self.submit_gate: asyncio.Event | None = None

    async def load_assessment(self, job_id: str) -> Assessment | None:
        doc = self.documents.get(job_id)
        return doc.model_copy(deep=True) if doc is not None else None

    async def save_assessment(self, job_id: str, assessment: Assessment) -> None:
        self.save_calls += 1
        if self.fail_saves:
            raise CollaboratorError("save failed")
        self.documents[job_id] = assessment.model_copy(deep=True)

    async def submit_response(self, job_id: str, response: ResponseDocument) -> None:
        self.submit_calls += 1
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.fail_submits:
            raise CollaboratorError("submit failed")
        self.responses.append((job_id, response))

    # --- server-side extras used by the HTTP routes ---

    async def list_responses(
        self, job_id: str, *, limit: int = 20, offset: int = 0
    ) -> list[ResponseDocument]:
        matching = [r for jid, r in self.responses if jid == job_id]
        matching.sort(key=lambda r: r.submitted_at, reverse=True)
        return matching[offset:offset + limit]

    async def count_assessments(self) -> int:
        return len(self.documents)
