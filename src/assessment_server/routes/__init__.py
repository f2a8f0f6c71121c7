"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from assessment_server.routes.assessments import router as assessments_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(assessments_router, prefix=API_PREFIX)
