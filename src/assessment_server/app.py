"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads seed assessments and optionally inserts them
  - CORS middleware
  - Global exception handlers (engine errors → 404/409/422/503)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``assessment-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from assessment_db.engine import dispose_engine, get_engine, transaction
from assessment_db.store import SqlAssessmentStore
from assessment_engine.errors import (
    AssessmentNotFoundError,
    CollaboratorError,
    InvalidTransitionError,
    SaveValidationError,
)
from assessment_engine.seeds import SeedStore

from assessment_server.config import ServerSettings, load_settings
from assessment_server.errors import (
    collaborator_error_handler,
    generic_error_handler,
    invalid_transition_handler,
    key_error_handler,
    not_found_handler,
    pydantic_validation_handler,
    save_validation_handler,
    value_error_handler,
)
from assessment_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Seeding
# ------------------------------------------------------------------

async def seed_assessments(seeds: SeedStore) -> int:
    """Insert every seed document if the assessments table is empty.

    Returns the number of documents inserted.
    """
    async with transaction() as db:
        store = SqlAssessmentStore(db)
        if await store.count_assessments() > 0:
            logger.info("assessments table not empty, skipping seed")
            return 0
        for job_id in seeds.job_ids():
            await store.save_assessment(job_id, seeds.get(job_id))
    logger.info("seeded %d assessments", len(seeds))
    return len(seeds)


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the seed assessments into a ``SeedStore``
      2. Insert them when ``SERVER_SEED_ON_STARTUP`` is set and the table is empty

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings

    # --- Load seeds ---
    seeds = SeedStore(seed_dir=settings.seed_dir)
    try:
        seeds.load()
    except FileNotFoundError as exc:
        logger.warning("seed assessments unavailable: %s", exc)
    app.state.seeds = seeds

    # --- Optional seeding ---
    if settings.seed_on_startup and len(seeds):
        try:
            await seed_assessments(seeds)
        except (SQLAlchemyError, CollaboratorError) as exc:
            logger.error("seeding failed, continuing without seed data: %s", exc)

    yield

    # --- Shutdown ---
    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Assessment API Server",
        description="REST API for authoring hiring assessments and collecting responses",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler and dependencies can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(AssessmentNotFoundError, not_found_handler)
    app.add_exception_handler(SaveValidationError, save_validation_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_handler)
    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)
    app.add_exception_handler(CollaboratorError, collaborator_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies DB connectivity."""
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": "database unavailable"}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn assessment_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``assessment-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "assessment_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
