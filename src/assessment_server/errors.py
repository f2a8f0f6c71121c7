"""Global exception handlers — map engine exceptions to HTTP status codes.

Route handlers only code the happy path and let engine exceptions
propagate; the handlers installed by ``create_app()`` pick the status code:

    AssessmentNotFoundError     → 404
    SaveValidationError         → 422 (issues are user-facing and returned)
    pydantic ValidationError    → 422
    InvalidTransitionError      → 409
    CollaboratorError           → 503
    other ValueError            → 400 / 404 by message
    KeyError                    → 404
    anything else               → 500

Starlette resolves handlers along the exception's MRO, so the specific
engine errors win over the ``ValueError`` fallback.  Raw messages are
logged server-side; clients only receive safe messages.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from assessment_engine.errors import (
    AssessmentNotFoundError,
    CollaboratorError,
    InvalidTransitionError,
    SaveValidationError,
)

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("not found", 404),
]

# --- Client-safe messages keyed by HTTP status code ---
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Operation not allowed in the current state",
    400: "Invalid request",
    503: "Service temporarily unavailable, retry",
}


async def not_found_handler(request: Request, exc: AssessmentNotFoundError) -> JSONResponse:
    logger.info("not found at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": _SAFE_MESSAGES[404]})


async def save_validation_handler(request: Request, exc: SaveValidationError) -> JSONResponse:
    """Return every save issue so the author can fix them."""
    logger.info("save rejected at %s: %s", request.url, [i.code for i in exc.issues])
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "issues": [issue.model_dump(exclude_none=True) for issue in exc.issues],
        },
    )


async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Malformed documents that got past request parsing (e.g. raw JSON bodies)."""
    logger.warning("document validation failed at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Invalid assessment document",
            "errors": exc.errors(include_url=False, include_context=False, include_input=False),
        },
    )


async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    logger.warning("invalid transition at %s: %s", request.url, exc)
    return JSONResponse(status_code=409, content={"detail": _SAFE_MESSAGES[409]})


async def collaborator_error_handler(request: Request, exc: CollaboratorError) -> JSONResponse:
    logger.error("collaborator failure at %s: %s", request.url, exc)
    return JSONResponse(status_code=503, content={"detail": _SAFE_MESSAGES[503]})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map any other ``ValueError`` (e.g. ``BuilderError``) by message, defaulting to 400.

    The raw message is logged but never sent to the client.
    """
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. an unknown question id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": _SAFE_MESSAGES[404]})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
