"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  In production
the values are typically overridden via env vars or a ``.env`` file.
"""

import os
from dataclasses import dataclass, field

# --- Pagination defaults ---
# Read at import time so FastAPI Query() defaults can reference them.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    # Seed directory (None → SeedStore default, seeds/assessments/ from repo root)
    seed_dir: str | None = None
    # Insert the seed assessments at startup when the table is empty
    seed_on_startup: bool = False

    # Drop non-numeric min/max/maxLength on save instead of rejecting it
    lenient_constraints: bool = False


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` / ``ASSESSMENT_*`` environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        seed_dir=os.getenv("SERVER_SEED_DIR") or None,
        seed_on_startup=_env_flag("SERVER_SEED_ON_STARTUP"),
        lenient_constraints=_env_flag("ASSESSMENT_LENIENT_CONSTRAINTS"),
    )
