"""FastAPI dependency injection — provides DB sessions, the assessment store and settings.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on error;
the repository and store only ever ``flush()``.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assessment_db.engine import transaction
from assessment_db.store import SqlAssessmentStore

from assessment_server.config import ServerSettings


# ------------------------------------------------------------------
# Database session: transaction boundary lives here
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    async with transaction() as session:
        yield session


def get_assessment_store(db: AsyncSession = Depends(get_db)) -> SqlAssessmentStore:
    """The engine collaborators bound to this request's DB session."""
    return SqlAssessmentStore(db)


# ------------------------------------------------------------------
# Settings: stashed on app.state by create_app()
# ------------------------------------------------------------------

def get_settings(request: Request) -> ServerSettings:
    return request.app.state.settings
