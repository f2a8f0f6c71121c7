"""Assessment endpoints — load, save, preview and submit.

The builder UI saves full documents with ``PUT`` and the respondent form
posts its answers to ``/submit``.  Both paths run through the engine's
save preparation and validation rules, so the server never stores a
document or a response the engine would reject.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from assessment_db.store import SqlAssessmentStore
from assessment_engine.builder import prepare_for_save
from assessment_engine.constants import INVALID_FIELD_MESSAGE
from assessment_engine.errors import AssessmentNotFoundError
from assessment_engine.models.assessment import Assessment, utcnow
from assessment_engine.models.session import AssessmentView, ResponseDocument
from assessment_engine.preview import build_view
from assessment_engine.validation import validate_submission

from assessment_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, ServerSettings
from assessment_server.dependencies import get_assessment_store, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assessments"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SubmitRequest(BaseModel):
    """Body for POST /assessments/{job_id}/submit."""
    model_config = ConfigDict(populate_by_name=True)

    values: dict[str, Any] = Field(default_factory=dict)
    submitted_at: datetime | None = Field(default=None, alias="submittedAt")


class PreviewRequest(BaseModel):
    """Body for POST /assessments/preview."""
    assessment: Assessment
    values: dict[str, Any] = Field(default_factory=dict)
    touched: list[str] = Field(default_factory=list)


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/assessments/preview")
async def preview_assessment(body: PreviewRequest) -> AssessmentView:
    """Render a (possibly unsaved) document for the given answers.

    Hidden questions are omitted and invalid flags follow ``touched``.
    """
    return build_view(body.assessment, body.values, set(body.touched))


@router.get("/assessments/{job_id}")
async def get_assessment(
    job_id: str,
    store: SqlAssessmentStore = Depends(get_assessment_store),
) -> dict[str, Any]:
    """Return the stored document.  Raises 404 if the job has none."""
    assessment = await store.load_assessment(job_id)
    if assessment is None:
        raise AssessmentNotFoundError(job_id)
    return assessment.to_document()


@router.put("/assessments/{job_id}")
async def save_assessment(
    job_id: str,
    document: dict[str, Any] = Body(...),
    store: SqlAssessmentStore = Depends(get_assessment_store),
    settings: ServerSettings = Depends(get_settings),
) -> dict[str, Any]:
    """Replace the document for a job.

    The path job id wins over any ``jobId`` in the body and ``updatedAt``
    is set to the time of the save.  Returns 422 with the list of issues
    when the document cannot be saved.
    """
    parsed = Assessment.from_document({**document, "jobId": job_id, "updatedAt": utcnow()})
    prepared = prepare_for_save(parsed, lenient_constraints=settings.lenient_constraints)
    await store.save_assessment(job_id, prepared)
    logger.info("assessment stored: job_id=%s questions=%d", job_id, prepared.question_count)
    return {"ok": True, "updatedAt": prepared.to_document()["updatedAt"]}


@router.post("/assessments/{job_id}/submit")
async def submit_response(
    job_id: str,
    body: SubmitRequest,
    store: SqlAssessmentStore = Depends(get_assessment_store),
):
    """Accept a filled-out response.

    The answers are re-validated against the stored document with every
    visible question treated as touched.  Returns 422 listing the invalid
    questions (first one in document order as ``focus``), 404 if the job
    has no assessment.
    """
    assessment = await store.load_assessment(job_id)
    if assessment is None:
        raise AssessmentNotFoundError(job_id)

    report = validate_submission(assessment, body.values)
    if not report.is_valid:
        invalid_ids = report.invalid_ids(assessment)
        logger.info("response rejected: job_id=%s invalid=%s", job_id, invalid_ids)
        return JSONResponse(
            status_code=422,
            content={
                "detail": INVALID_FIELD_MESSAGE,
                "focus": invalid_ids[0],
                "invalid": invalid_ids,
                "reasons": report.reasons,
            },
        )

    response = ResponseDocument(values=body.values, submitted_at=body.submitted_at or utcnow())
    await store.submit_response(job_id, response)
    return {"ok": True}


@router.get("/assessments/{job_id}/responses")
async def list_responses(
    job_id: str,
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    store: SqlAssessmentStore = Depends(get_assessment_store),
) -> list[dict[str, Any]]:
    """List submitted responses for a job, most recent first."""
    responses = await store.list_responses(job_id, limit=limit, offset=offset)
    return [r.to_document() for r in responses]
